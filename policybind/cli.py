"""Policybind CLI: reconcile one bucket policy member from the command line.

Usage examples::

    policybind -b my-bucket -r roles/storage.objectViewer -m user:a@example.com observe
    policybind -b my-bucket -r roles/storage.objectViewer -m user:a@example.com ensure
    policybind -c '{"project_id":"p"}' -b my-bucket -r roles/viewer -m group:g@example.com remove
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

OPERATIONS = ("observe", "ensure", "remove")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the ``policybind`` CLI.

    Returns:
        Configured :class:`~argparse.ArgumentParser`.
    """
    parser = argparse.ArgumentParser(
        prog="policybind",
        description="Keep one member bound to one role on a GCS bucket",
    )
    parser.add_argument("--bucket", "-b", required=True, help="Bucket name")
    parser.add_argument("--role", "-r", required=True, help="IAM role")
    parser.add_argument(
        "--member", "-m",
        required=True,
        help="IAM member (e.g. user:a@example.com)",
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        default="{}",
        help='JSON config string (e.g. \'{"project_id":"my-project"}\')',
    )
    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=None,
        help="Deadline in seconds for the whole cycle",
    )
    parser.add_argument(
        "operation",
        choices=OPERATIONS,
        help="observe: report drift; ensure: bind the member; remove: unbind it",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.

    Parses arguments, builds the managed resource and a connector via the
    universal factory, and runs the requested operation.  The outcome is
    printed as JSON.

    Args:
        argv: Optional argument list (defaults to ``sys.argv``).
    """
    parser = _build_parser()
    ns = parser.parse_args(argv)

    try:
        config: dict[str, Any] = json.loads(ns.config)
    except json.JSONDecodeError as e:
        print(f"Invalid --config JSON: {e}", file=sys.stderr)
        sys.exit(1)

    # Lazy-import to avoid loading the GCP SDK for --help
    from policybind.base.context import CycleContext
    from policybind.base.exceptions import PolicyBindError
    from policybind.base.resources import BucketPolicyMember
    from policybind.factory import universal_connector
    from policybind.reconciler import Reconciler

    try:
        mg = BucketPolicyMember(
            name=f"{ns.bucket}-{ns.role}-{ns.member}",
            spec={"for_provider": {
                "bucket": ns.bucket, "role": ns.role, "member": ns.member,
            }},
            deletion_requested=ns.operation == "remove",
        )
        connector = universal_connector("bucket_policy_member", "gcp", config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    ctx = CycleContext(timeout=ns.timeout)
    try:
        if ns.operation == "observe":
            observation = connector.connect(mg).observe(mg, ctx)
            result: dict[str, Any] = {"action": "none"}
        else:
            outcome = Reconciler(connector).reconcile(mg, ctx)
            observation = outcome.observation
            result = {"action": outcome.action.value}
    except PolicyBindError as e:
        print(f"Operation failed: {e}", file=sys.stderr)
        sys.exit(1)

    result["resource_exists"] = observation.resource_exists
    result["resource_up_to_date"] = observation.resource_up_to_date
    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
