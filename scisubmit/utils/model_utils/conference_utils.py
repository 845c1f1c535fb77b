from __future__ import annotations

from typing import List, Optional

from scisubmit.models.Conference import Category, Conference
from scisubmit.models.enumerations import ConferenceStatus
from scisubmit.utils.logging_utils import get_logger, log_context

from .base import create_instance, delete_instance, get_instance, list_instances, update_instance

logger = get_logger("conference")


def create_conference(*, actor_id=None, **attributes) -> Conference:
    with log_context(module="conference_utils", action="create_conference", actor_id=actor_id):
        conference = create_instance(Conference, commit=True, actor_id=actor_id, event_name="conference.create",
                                     **attributes)
        logger.info("create_conference id=%s year=%s status=%s", conference.id, conference.year,
                    conference.status.value)
        return conference


def get_conference_by_id(conference_id) -> Optional[Conference]:
    return get_instance(Conference, conference_id)


def list_conferences(*, status: Optional[ConferenceStatus] = None) -> List[Conference]:
    filters = [Conference.status == status] if status is not None else []
    return list_instances(Conference, filters=filters, order_by=[Conference.year.desc(), Conference.start_date.desc()])


def update_conference(conference: Conference, *, commit: bool = True, actor_id=None, **attributes) -> Conference:
    return update_instance(conference, commit=commit, actor_id=actor_id, event_name="conference.update", **attributes)


def delete_conference(conference: Conference, *, actor_id=None) -> None:
    delete_instance(conference, commit=True, actor_id=actor_id, event_name="conference.delete")


def create_category(*, actor_id=None, **attributes) -> Category:
    return create_instance(Category, commit=True, actor_id=actor_id, event_name="category.create", **attributes)


def get_category_by_id(category_id) -> Optional[Category]:
    return get_instance(Category, category_id)


def get_category_by_name(name: str) -> Optional[Category]:
    return Category.query.filter(Category.name == name).first()


def list_categories(*, active_only: bool = False) -> List[Category]:
    filters = [Category.is_active.is_(True)] if active_only else []
    return list_instances(Category, filters=filters, order_by=Category.name.asc())


def update_category(category: Category, *, actor_id=None, **attributes) -> Category:
    return update_instance(category, commit=True, actor_id=actor_id, event_name="category.update", **attributes)


def delete_category(category: Category, *, actor_id=None) -> None:
    delete_instance(category, commit=True, actor_id=actor_id, event_name="category.delete")
