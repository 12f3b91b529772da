"""
CodeGraph server entry point.

Run with: python main.py
Or with uvicorn: uvicorn app:app --reload

CODEGRAPH_HOST and CODEGRAPH_PORT select the bind address; reload is enabled
while ENVIRONMENT is "development".
"""

import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "app:app",
        host=os.getenv("CODEGRAPH_HOST", "0.0.0.0"),
        port=int(os.getenv("CODEGRAPH_PORT", "8000")),
        reload=os.getenv("ENVIRONMENT", "development") == "development",
        log_level=os.getenv("CODEGRAPH_LOG_LEVEL", "INFO").lower(),
    )


if __name__ == "__main__":
    main()
