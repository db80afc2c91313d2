import logging
from collections import defaultdict, deque
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError
from app.models.orm import Activity

logger = logging.getLogger(__name__)


def build_adjacency(rows: Iterable[Tuple[int, Optional[int]]]) -> Dict[int, List[int]]:
    # (id, parent_id) -> {parent_id: [id детей]}
    children: Dict[int, List[int]] = defaultdict(list)
    for activity_id, parent_id in rows:
        if parent_id is not None:
            children[parent_id].append(activity_id)
    return dict(children)


def descendant_closure(children_by_parent: Mapping[int, Iterable[int]], root_id: int) -> Set[int]:
    """Return root_id plus every activity id reachable through child links.

    Depth is not limited. Already visited ids are skipped, so a corrupted
    tree with a cycle still terminates.
    """
    visited = {root_id}
    queue = deque([root_id])
    while queue:
        current = queue.popleft()
        for child_id in children_by_parent.get(current, ()):
            if child_id not in visited:
                visited.add(child_id)
                queue.append(child_id)
    return visited


async def get_activity_subtree_ids(session: AsyncSession, root_id: int) -> Set[int]:
    # тянем все пары (id, parent_id) одним запросом и обходим дерево в питоне
    result = await session.execute(select(Activity.id, Activity.parent_id))
    rows = result.all()

    if not any(activity_id == root_id for activity_id, _ in rows):
        raise NotFoundError("Activity not found")

    ids = descendant_closure(build_adjacency(rows), root_id)
    logger.debug("Activity %s subtree resolved to %d ids", root_id, len(ids))
    return ids
