"""Run the API under uvicorn: `python -m compliancedb.serve`."""

import os

import uvicorn


def _truthy(value: str) -> bool:
    return value.lower() in {"1", "true", "yes", "on"}


def main() -> None:
    uvicorn.run(
        "compliancedb.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=_truthy(os.getenv("RELOAD", "false")),
        log_level=os.getenv("LOG_LEVEL", "info"),
        proxy_headers=True,
        forwarded_allow_ips=os.getenv("FORWARDED_ALLOW_IPS", "*"),
    )


if __name__ == "__main__":
    main()
