"""
List Registry - named expense lists and the active-list selection

Guarantees at least one list exists once the tracker is opened (the default
"General" list) and that the active selection always points at a real list.
"""

from moneytracker.kernel.errors import ValidationRejected
from moneytracker.kernel.ids import IdFactory, default_id_factory
from moneytracker.kernel.logging import get_logger
from moneytracker.kernel.metrics import record_rejection
from moneytracker.kernel.policy import TrackerPolicy, default_policy
from moneytracker.kernel.validation import require_name
from moneytracker.lists.models import ExpenseList
from moneytracker.snapshot import LISTS_KEY, SELECTED_LIST_KEY, SharedSnapshot

logger = get_logger(__name__)


class ListRegistry:
    """
    Owns the lists collection and the selected list id

    Query methods: all, get, active_list_id, active_list
    """

    def __init__(
        self,
        snapshot: SharedSnapshot,
        policy: TrackerPolicy = default_policy,
        id_factory: IdFactory = default_id_factory,
    ) -> None:
        self.snapshot = snapshot
        self.policy = policy
        self.id_factory = id_factory

    def all(self) -> list[ExpenseList]:
        return list(self.snapshot.lists)

    def get(self, list_id: str | None) -> ExpenseList | None:
        if list_id is None:
            return None
        return next((lst for lst in self.snapshot.lists if lst.id == list_id), None)

    def default_list(self) -> ExpenseList | None:
        """The list named like the default list (case-insensitive), if any"""
        wanted = self.policy.default_list_name.lower()
        return next(
            (lst for lst in self.snapshot.lists if lst.name.lower() == wanted), None
        )

    def ensure_default_list(self) -> ExpenseList:
        """
        Return the default list, creating it first in order if missing

        Idempotent. A newly created default list becomes active when nothing
        is selected yet.
        """
        existing = self.default_list()
        if existing is not None:
            return existing

        created = ExpenseList(id=self.id_factory.generate(), name=self.policy.default_list_name)
        self.snapshot.lists.insert(0, created)
        changed = [LISTS_KEY]
        if self.snapshot.selected_list_id is None:
            self.snapshot.selected_list_id = created.id
            changed.append(SELECTED_LIST_KEY)
        self.snapshot.persist(*changed)

        logger.info("Default list created", list_id=created.id, name=created.name)
        return created

    def add_list(self, name: str) -> ExpenseList | None:
        """
        Append a new list and make it active

        Returns:
            The new list, or None if the name was blank
        """
        try:
            trimmed = require_name(name, "List")
        except ValidationRejected as e:
            record_rejection("add_list", type(e).__name__)
            logger.info("List not added", reason=str(e))
            return None

        created = ExpenseList(id=self.id_factory.generate(), name=trimmed)
        self.snapshot.lists.append(created)
        self.snapshot.selected_list_id = created.id
        self.snapshot.persist(LISTS_KEY, SELECTED_LIST_KEY)

        logger.info("List added", list_id=created.id, name=created.name)
        return created

    def select(self, list_id: str) -> bool:
        """Make an existing list active; unknown ids are ignored"""
        if self.get(list_id) is None:
            record_rejection("select_list", "ListNotFound")
            logger.info("List not selected", list_id=list_id, reason="unknown list")
            return False
        self.snapshot.selected_list_id = list_id
        self.snapshot.persist(SELECTED_LIST_KEY)
        return True

    def active_list_id(self) -> str | None:
        """Selected list if it still exists, else the first list"""
        selected = self.snapshot.selected_list_id
        if selected is not None and self.get(selected) is not None:
            return selected
        return self.snapshot.lists[0].id if self.snapshot.lists else None

    def active_list(self) -> ExpenseList | None:
        return self.get(self.active_list_id())

    def reconcile_selection(self) -> None:
        """Repoint a missing or dangling selection at the first list"""
        resolved = self.active_list_id()
        if resolved != self.snapshot.selected_list_id:
            logger.info(
                "Active list reset",
                previous=self.snapshot.selected_list_id,
                current=resolved,
            )
            self.snapshot.selected_list_id = resolved
            self.snapshot.persist(SELECTED_LIST_KEY)
