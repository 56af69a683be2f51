from __future__ import annotations

from typing import Any

from prboard.handler import lambda_handler


class StubOrchestrator:
    def __init__(self, result: dict[str, Any]) -> None:
        self.result = result

    async def run_refresh(self) -> dict[str, Any]:
        return self.result


def test_lambda_handler_reports_success() -> None:
    response = lambda_handler({"source": "schedule"}, None, orchestrator=StubOrchestrator({"success": True, "count": 2}))

    assert response == {"statusCode": 200, "result": {"success": True, "count": 2}}


def test_lambda_handler_reports_failure() -> None:
    response = lambda_handler(None, None, orchestrator=StubOrchestrator({"success": False, "error": "bad credentials"}))

    assert response["statusCode"] == 500
    assert response["result"]["error"] == "bad credentials"
