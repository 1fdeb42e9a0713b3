from __future__ import annotations
import argparse
import json
import sys
import time
from datetime import datetime
from typing import List, Optional

from clipflow.app.analysis.detector import EnhancedDetector
from clipflow.app.analysis.content_classifier import ContentClassifier
from clipflow.app.config import DB_PATH, ensure_dirs, load_settings
from clipflow.app.logging_config import configure_logging
from clipflow.core.storage.item_store import ItemStore
from clipflow.core.storage.models import ClipboardItem

PREVIEW = 60

def _fmt_item(item: ClipboardItem) -> str:
    when = datetime.fromtimestamp(item.timestamp / 1000).strftime("%Y-%m-%d %H:%M:%S")
    one_line = " ".join(item.content.split())
    if len(one_line) > PREVIEW:
        one_line = one_line[: PREVIEW - 3] + "..."
    pin = "*" if item.is_pinned else " "
    cats = f" [{', '.join(sorted(item.categories))}]" if item.categories else ""
    return f"{pin} {item.id}  {when}  {item.type:<11} {item.source:<14} {one_line}{cats}"

def _print_items(items: List[ClipboardItem]) -> None:
    if not items:
        print("(No clipboard history)")
        return
    for item in items:
        print(_fmt_item(item))

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="clipflow", description="ClipFlow clipboard history")
    ap.add_argument("--db", default=None, help=f"database path (default: {DB_PATH})")
    ap.add_argument("-v", "--verbose", action="store_true")
    sub = ap.add_subparsers(dest="cmd", required=True)

    sub.add_parser("run", help="Capture clipboard changes until interrupted")

    p_list = sub.add_parser("list", help="Show recent history")
    p_list.add_argument("--limit", type=int, default=25)
    p_list.add_argument("--type", dest="item_type")

    p_search = sub.add_parser("search", help="Search content, type, source and categories")
    p_search.add_argument("query")
    p_search.add_argument("--limit", type=int, default=25)

    sub.add_parser("types", help="List content types present in history")

    p_classify = sub.add_parser("classify", help="Classify text without storing it")
    p_classify.add_argument("text")
    p_classify.add_argument("--app", default="System", help="foreground app to attribute against")

    p_pin = sub.add_parser("pin", help="Toggle pin on an item")
    p_pin.add_argument("id")

    p_del = sub.add_parser("delete", help="Delete an item")
    p_del.add_argument("id")

    p_cat = sub.add_parser("categorize", help="Add or remove a category label")
    p_cat.add_argument("id")
    p_cat.add_argument("label")
    p_cat.add_argument("--remove", action="store_true")

    p_copy = sub.add_parser("copy", help="Put an item back on the clipboard")
    p_copy.add_argument("id")

    p_clear = sub.add_parser("clear", help="Delete all history")
    p_clear.add_argument("--yes", action="store_true")
    return ap

def _run(store: ItemStore) -> int:
    from clipflow.app.controller.runner import CaptureRuntime

    runtime = CaptureRuntime(store, settings=load_settings())
    runtime.start()
    try:
        while True:
            time.sleep(1.0)
    except KeyboardInterrupt:
        pass
    finally:
        runtime.stop()
    return 0

def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(debug=args.verbose, json_logs=args.cmd == "run")

    if args.cmd == "classify":
        settings = load_settings()
        detector = EnhancedDetector(ContentClassifier(user_rules=settings.active_rules()))
        result = detector.detect(args.text, args.app)
        print(json.dumps({
            "type": result.content_type,
            "type_confidence": result.type_confidence,
            "source": result.source_app,
            "confidence": result.confidence,
            "reasoning": list(result.reasoning),
        }, indent=2))
        return 0

    if args.db is None:
        ensure_dirs()
    with ItemStore(args.db) as store:
        if args.cmd == "run":
            return _run(store)

        if args.cmd == "list":
            items = store.list_by_type(args.item_type, args.limit) if args.item_type else store.list_all(args.limit)
            _print_items(items)
            return 0

        if args.cmd == "search":
            _print_items(store.search(args.query, args.limit))
            return 0

        if args.cmd == "types":
            for t in store.unique_types():
                print(t)
            return 0

        if args.cmd == "pin":
            if store.get(args.id) is None:
                print(f"No item {args.id}", file=sys.stderr)
                return 1
            print("pinned" if store.toggle_pin(args.id) else "unpinned")
            return 0

        if args.cmd == "delete":
            if store.get(args.id) is None:
                print(f"No item {args.id}", file=sys.stderr)
                return 1
            store.delete(args.id)
            return 0

        if args.cmd == "categorize":
            ok = store.remove_category(args.id, args.label) if args.remove else store.add_category(args.id, args.label)
            if not ok:
                print(f"No item {args.id}", file=sys.stderr)
                return 1
            return 0

        if args.cmd == "copy":
            from clipflow.core.clipboard.backends import write_clipboard_text

            item = store.get(args.id)
            if item is None:
                print(f"No item {args.id}", file=sys.stderr)
                return 1
            # A running capture process sees this as a recopy and bumps the item.
            write_clipboard_text(item.content)
            return 0

        if args.cmd == "clear":
            if not args.yes:
                print("Refusing to clear history without --yes", file=sys.stderr)
                return 2
            store.clear_all()
            return 0

    return 0

if __name__ == "__main__":
    sys.exit(main())
