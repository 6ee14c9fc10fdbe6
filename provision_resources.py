#!/usr/bin/env python3
"""
Provision resource types in the attachments store.

Resource types are normally provisioned by the services at startup from
``RESOURCE_TYPES``.  This script adds types to an existing store without
restarting the services, and lists the types already present.

Usage:
    python provision_resources.py --db ./attachments.db books authors
    python provision_resources.py --db ./attachments.db --list
"""

import argparse
import os
import sys
from typing import List, Optional

from attachments_api.app.core.errors import AttachmentsError
from attachments_api.app.core.store import BucketStore
from attachments_api.app.services.namespace_service import ResourceNamespaceService


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Provision resource types in the attachments store.")
    ap.add_argument("--db", required=True, help="Path to SQLite DB file (e.g., ./attachments.db)")
    ap.add_argument("--list", action="store_true", help="List provisioned resource types")
    ap.add_argument("--create", action="store_true", help="Create the DB file if it does not exist")
    ap.add_argument("types", nargs="*", help="Resource types to provision (e.g., books authors)")
    args = ap.parse_args(argv)

    if not args.types and not args.list:
        ap.error("nothing to do: pass resource types and/or --list")

    if not os.path.exists(args.db) and not args.create:
        print(f"[!] DB not found: {args.db}", file=sys.stderr)
        return 1

    store = BucketStore(args.db)
    try:
        store.open()
        namespaces = ResourceNamespaceService(store)
        if args.types:
            namespaces.provision(args.types)
            print(f"[+] Provisioned: {', '.join(sorted(set(args.types)))}")
        if args.list:
            for name in namespaces.list_types():
                print(name)
    except AttachmentsError as e:
        print(f"[!] Provisioning failed: {e}", file=sys.stderr)
        return 2
    finally:
        store.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
