"""Handler listing the conditions predefined for an ambulance."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any

from .models import Ambulance
from .updater import Response, update_ambulance


def get_conditions(db: Any, ambulance_id: str) -> Response:
    """Return the predefined conditions of an ambulance."""

    def read(ambulance: Ambulance):
        conditions = [condition.to_dict() for condition in ambulance.predefined_conditions]
        return None, conditions, int(HTTPStatus.OK)

    return update_ambulance(db, ambulance_id, read)