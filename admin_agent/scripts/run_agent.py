"""Run the Admin Agent service locally.

Reloads on code changes when ``APP_ENV=development``. Dependencies must
already be installed (e.g. ``pip install -e .``).
"""

from __future__ import annotations


def main() -> None:
    import uvicorn

    from admin_agent.core.config import get_settings

    settings = get_settings()
    reload_enabled = settings.app_env == "development"
    uvicorn.run(
        "admin_agent.llm.main:app",
        host=settings.agent_host,
        port=settings.agent_port,
        reload=reload_enabled,
    )


if __name__ == "__main__":
    main()
