from __future__ import annotations

import argparse
from pathlib import Path

from pp_envvars.config import apply, connect, load, plan


def _progress(schema_name: str, event: str) -> None:
    if event == "start":
        print(f"[apply:start] {schema_name}")
    else:
        print(f"[apply:done]  {schema_name}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Plan/apply environment variable values")
    parser.add_argument("--config", default="pp-envvars.yaml", help="Path to config file")
    parser.add_argument("--values", default=None, help="Desired-state JSON file")
    parser.add_argument("--apply", action="store_true", help="Apply the changes")
    args = parser.parse_args()

    config = load(Path(args.config))
    values = Path(args.values) if args.values else None

    provider = connect(config)
    try:
        report = plan(config, values, provider=provider)
        print("Plan summary:", report.summary())
        for outcome in report.outcomes:
            print(f"- {outcome.outcome.value:20} {outcome.schema_name}")

        if args.apply:
            report = apply(config, values, provider=provider, progress=_progress)
            print("Apply summary:", report.summary())
    finally:
        provider.close()

    report.raise_for_failures()


if __name__ == "__main__":
    main()
