"""
================================================================================
Allure Report Utilities
================================================================================

Attachment helpers used by the instrumentation engines and the screenshot
diff to put results into the Allure report.

================================================================================
"""

import dataclasses
import json
from typing import Any

import allure


def _to_jsonable(data: Any) -> Any:
    if dataclasses.is_dataclass(data) and not isinstance(data, type):
        return dataclasses.asdict(data)
    return data


def attach_json(data: Any, name: str = "Data") -> None:
    """
    Attach JSON data to Allure report.

    Dataclass instances (result records) are converted with ``asdict``.

    Args:
        data: Data to attach (will be JSON serialized)
        name: Attachment name
    """
    json_str = json.dumps(_to_jsonable(data), indent=2, default=str)
    allure.attach(
        json_str,
        name=name,
        attachment_type=allure.attachment_type.JSON
    )


def attach_png(data: bytes, name: str = "Screenshot") -> None:
    """Attach PNG bytes to Allure report."""
    allure.attach(
        data,
        name=name,
        attachment_type=allure.attachment_type.PNG
    )


__all__ = ["attach_json", "attach_png"]
