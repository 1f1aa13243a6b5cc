"""Services feeding the scheduling engine.

Import from the submodules directly (``shiftboard.services.roster`` ...);
``attendance`` depends on ``shiftboard.config``, which itself loads the
domain package.
"""
