"""One-shot setup of the ``git wt`` alias."""

import git

from git_wt.constants import GIT_ALIAS_NAME, GIT_ALIAS_VALUE
from git_wt.exceptions import AliasSetupFailed
from git_wt.logging_config import get_logger
from git_wt.services.git.backend import stderr_of

logger = get_logger(__name__)

MANUAL_ALIAS_COMMAND = f"git config --global {GIT_ALIAS_NAME} '{GIT_ALIAS_VALUE}'"


def setup_alias() -> bool:
    """Point ``git wt`` at ``git-wt`` in the user's global git config.

    Returns:
        False when the alias was already set, True when it was written

    Raises:
        AliasSetupFailed: the config could not be written; callers fall back
            to showing MANUAL_ALIAS_COMMAND
    """
    runner = git.Git()
    try:
        current = runner.config("--global", "--get", GIT_ALIAS_NAME)
    except git.exc.GitCommandError:
        # Unset
        current = None

    if current == GIT_ALIAS_VALUE:
        logger.info(f"{GIT_ALIAS_NAME} already set")
        return False
    if current:
        logger.warning(f"Replacing existing {GIT_ALIAS_NAME} = {current!r}")

    try:
        runner.config("--global", GIT_ALIAS_NAME, GIT_ALIAS_VALUE)
    except git.exc.GitCommandError as e:
        raise AliasSetupFailed(stderr_of(e))
    logger.info(f"Set {GIT_ALIAS_NAME} = {GIT_ALIAS_VALUE}")
    return True
