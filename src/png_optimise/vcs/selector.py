"""从可用仓库中确定唯一目标仓库。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional, Sequence

from png_optimise.core.exceptions import IntegrationUnavailableError, NoRepositoryError, UserCancelledError
from png_optimise.vcs.git import GitIntegration, GitRepository

LOGGER = logging.getLogger(__name__)

PickOne = Callable[[Sequence[str]], Optional[str]]


def select_repository(
    explicit_target: Optional[Path],
    integration: GitIntegration,
    pick_one: PickOne,
) -> GitRepository:
    """解析出唯一仓库。

    - 未指定目标且有多个仓库时必须交由 ``pick_one`` 选择，绝不默认取第一个；
    - ``pick_one`` 返回 None 视为用户取消。
    """

    if not integration.available:
        raise IntegrationUnavailableError("Git extension isn't enabled")

    if explicit_target is not None:
        repo = integration.get_repository(explicit_target)
        if repo is None:
            raise NoRepositoryError("No repository found")
        return repo

    available = integration.repositories()
    LOGGER.debug("可用仓库数量: %d", len(available))

    if not available:
        raise NoRepositoryError("No repository found")
    if len(available) == 1:
        return available[0]

    choice = pick_one([str(repo.root) for repo in available])
    if choice is None:
        raise UserCancelledError("Repository selection cancelled")

    for repo in available:
        if str(repo.root) == choice:
            return repo
    repo = integration.get_repository(Path(choice))
    if repo is None:
        raise NoRepositoryError("No repository found")
    return repo
