"""Domain service: find the physical table a digital menu order refers to.

The digital menu only knows a table *number* and, optionally, a floor
*name*.  Table numbers are not unique across floors, so the floor is used
to disambiguate when it resolves; otherwise the first table carrying the
number wins, in the order the repository lists tables.
"""

from __future__ import annotations

import logging

from dms.domain.model.pos import Table
from dms.domain.repository.pos_repository import PosRepository

logger = logging.getLogger(__name__)


class TableResolver:

    def __init__(self, pos_repo: PosRepository) -> None:
        self._pos_repo = pos_repo

    def resolve(self, table_number: str, floor_label: str | None = None) -> Table | None:
        tables = self._pos_repo.get_tables()

        if floor_label:
            floor = next(
                (f for f in self._pos_repo.get_floors() if f.name.lower() == floor_label.lower()),
                None,
            )
            if floor is None:
                logger.warning(
                    'Floor "%s" not found, searching all floors for table %s',
                    floor_label,
                    table_number,
                )
            else:
                for table in tables:
                    if table.table_number == table_number and table.floor_id == floor.id:
                        return table
                logger.warning(
                    'Table %s not found on floor "%s", searching all floors',
                    table_number,
                    floor_label,
                )

        matches = [t for t in tables if t.table_number == table_number]
        if len(matches) > 1:
            logger.warning(
                'Multiple tables with number "%s" found on different floors. Using first match.',
                table_number,
            )
        return matches[0] if matches else None
