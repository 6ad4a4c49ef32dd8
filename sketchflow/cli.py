#!/usr/bin/env python3
"""Sketchflow CLI - create, edit, compile and validate .excalidraw files."""

import argparse
import json
import logging
import math
import sys

from pydantic import ValidationError

from .core.analysis import find_element, match_id, summarize_document
from .core.compiler import compile_parsed
from .core.connectors import connect
from .core.dsl import EmptyDiagramError, parse_quick_dsl
from .core.elements import (
    ELEMENT_TYPES,
    InvalidElementError,
    create_element,
    estimate_text_size,
    merge_element,
    validate_element_input,
)
from .core.layout import Direction
from .core.models import SHAPE_TYPES, ElementType, TextAlign
from .core.styles import PRESETS
from .core.validation import apply_strict, format_validation_result, validate_document
from .log import setup_logging
from .storage import (
    DocumentExistsError,
    DocumentNotFoundError,
    InvalidDocumentError,
    InvalidJsonError,
    create_empty_document,
    load_json,
    read_document,
    write_document,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_NOT_FOUND = 2
EXIT_INVALID_JSON = 3
EXIT_INVALID_INPUT = 4


def _json_out(data):
    print(json.dumps(data, indent=2))


def _brief(el) -> dict:
    return {"id": el.id, "type": el.type, "x": el.x, "y": el.y,
            "width": el.width, "height": el.height}


def _parse_pair(value: str, flag: str) -> tuple[float, float]:
    """Parse "a,b" into two floats."""
    try:
        a, b = (float(part) for part in value.split(","))
    except ValueError:
        raise InvalidElementError(f"{flag} expects two comma-separated numbers, got {value!r}") from None
    return a, b


def _parse_set_options(pairs: list[str]) -> dict:
    """Parse --set key=value pairs; values are decoded as JSON when possible."""
    updates = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep:
            raise InvalidElementError(f"Invalid --set format: {pair}. Use key=value")
        try:
            updates[key] = json.loads(raw)
        except json.JSONDecodeError:
            updates[key] = raw
    return updates


def _read_stdin() -> str:
    if sys.stdin.isatty():
        raise InvalidElementError("No input provided on stdin")
    return sys.stdin.read()


def _parse_update_object(raw: str, flag: str) -> dict:
    """Decode a JSON update; only objects can be merged into an element."""
    updates = json.loads(raw)
    if not isinstance(updates, dict):
        raise InvalidElementError(f"{flag} must be a JSON object")
    return updates


# ── Files ────────────────────────────────────────────────────────────────────

def cmd_create(args):
    document = create_empty_document(background=args.background, grid_size=args.grid)
    write_document(args.file, document, force=args.force)
    _json_out({
        "success": True,
        "file": args.file,
        "appState": document.app_state.to_json_dict(),
        "elementCount": 0,
    })
    return EXIT_OK


def cmd_info(args):
    document = read_document(args.file)
    info = summarize_document(document).to_dict()

    if args.format == "text":
        types = ", ".join(f"{t}({c})" for t, c in info["elementTypes"].items())
        bounds = info["bounds"]
        print(f"Version: {info['version']}")
        print(f"Source: {info['source']}")
        print(f"Elements: {info['elementCount']}")
        print(f"Types: {types}")
        print(f"Bounds: x={bounds['x']}, y={bounds['y']}, w={bounds['width']}, h={bounds['height']}")
        print(f"Background: {info['appState']['viewBackgroundColor']}")
        print(f"Grid: {info['appState']['gridSize'] or 'none'}")
    else:
        _json_out(info)
    return EXIT_OK


# ── Elements ─────────────────────────────────────────────────────────────────

def _inputs_from_args(args) -> list[dict]:
    raw = _read_stdin() if args.stdin else args.data
    if raw:
        parsed = json.loads(raw)
        items = parsed if isinstance(parsed, list) else [parsed]
        for item in items:
            validate_element_input(item)
        return items

    if not args.type:
        raise InvalidElementError("--type is required when not using --stdin or --data")
    if args.x is None or args.y is None:
        raise InvalidElementError("--x and --y are required")

    item = {"type": args.type, "x": args.x, "y": args.y}
    optional = {
        "id": args.id,
        "width": args.width,
        "height": args.height,
        "strokeColor": args.stroke,
        "backgroundColor": args.fill,
        "strokeWidth": args.stroke_width,
        "strokeStyle": args.stroke_style,
        "fillStyle": args.fill_style,
        "roughness": args.roughness,
        "opacity": args.opacity,
        "text": args.text,
        "fontSize": args.font_size,
        "fontFamily": args.font_family,
        "textAlign": args.text_align,
        "startArrowhead": args.start_arrow,
        "endArrowhead": args.end_arrow,
    }
    item.update({k: v for k, v in optional.items() if v is not None})
    if args.points:
        item["points"] = json.loads(args.points)
    if args.start_binding:
        item["startBinding"] = {"elementId": args.start_binding, "focus": 0, "gap": 5}
    if args.end_binding:
        item["endBinding"] = {"elementId": args.end_binding, "focus": 0, "gap": 5}
    return [item]


def cmd_add(args):
    document = read_document(args.file)
    new_elements = [create_element(item) for item in _inputs_from_args(args)]

    if args.center_in and len(new_elements) == 1 and new_elements[0].type == ElementType.TEXT.value:
        target = find_element(document.elements, args.center_in)
        if target is not None:
            text_el = new_elements[0]
            new_elements[0] = text_el.model_copy(update={
                "x": target.x + (target.width - text_el.width) / 2,
                "y": target.y + (target.height - text_el.height) / 2,
            })
            logger.debug("Centered text in %s", target.id)

    if args.label:
        for el in list(new_elements):
            if el.type not in SHAPE_TYPES:
                continue
            text_width, text_height = estimate_text_size(args.label, args.label_size)
            new_elements.append(create_element({
                "type": ElementType.TEXT.value,
                "x": el.x + (el.width - text_width) / 2,
                "y": el.y + (el.height - text_height) / 2,
                "text": args.label,
                "fontSize": args.label_size,
                "textAlign": TextAlign.CENTER.value,
            }))

    document.elements.extend(new_elements)
    write_document(args.file, document, force=True)
    logger.info("Added %d element(s)", len(new_elements))

    _json_out({"success": True, "added": [_brief(el) for el in new_elements]})
    return EXIT_OK


def _select(elements, args):
    selected = [el for el in elements if not el.is_deleted]
    if args.type:
        selected = [el for el in selected if el.type == args.type]
    if args.id:
        selected = [el for el in selected if match_id(el.id, args.id)]
    return selected


def cmd_list(args):
    document = read_document(args.file)
    elements = _select(document.elements, args)

    if args.format == "ids":
        for el in elements:
            print(el.id)
    elif args.format == "table":
        if not elements:
            print("No elements")
            return EXIT_OK
        headers = ["ID", "Type", "X", "Y", "Width", "Height"]
        rows = [[el.id[:8] + "...", el.type, round(el.x), round(el.y),
                 round(el.width), round(el.height)] for el in elements]
        widths = [max(len(h), *(len(str(r[i])) for r in rows)) for i, h in enumerate(headers)]
        header_line = "  ".join(h.ljust(widths[i]) for i, h in enumerate(headers))
        print(header_line)
        print("-" * len(header_line))
        for row in rows:
            print("  ".join(str(v).ljust(widths[i]) for i, v in enumerate(row)))
    elif args.brief:
        _json_out([_brief(el) for el in elements])
    else:
        _json_out([el.to_json_dict() for el in elements])
    return EXIT_OK


def cmd_modify(args):
    document = read_document(args.file)
    updates = _parse_set_options(args.set or [])
    if args.stdin:
        updates.update(_parse_update_object(_read_stdin(), "--stdin"))
    if args.data:
        updates.update(_parse_update_object(args.data, "--data"))
    if args.resize:
        updates["width"], updates["height"] = _parse_pair(args.resize, "--resize")
    if args.rotate is not None:
        updates["angle"] = math.radians(args.rotate)

    modified = []
    for el in document.elements:
        if el.is_deleted or not match_id(el.id, args.id):
            continue
        changes = dict(updates)
        if args.move:
            dx, dy = _parse_pair(args.move, "--move")
            changes["x"] = el.x + dx
            changes["y"] = el.y + dy
        if args.moveto:
            changes["x"], changes["y"] = _parse_pair(args.moveto, "--moveto")
        updated = merge_element(el, changes)
        document.replace_element(updated)
        modified.append(updated)

    if not modified:
        _json_out({"success": False, "error": f"No elements match: {args.id}"})
        return EXIT_FAILURE

    write_document(args.file, document, force=True)
    _json_out({"success": True, "modified": [_brief(el) for el in modified]})
    return EXIT_OK


def cmd_delete(args):
    if not (args.id or args.type or args.all):
        _json_out({"success": False, "error": "Specify --id, --type, or --all"})
        return EXIT_FAILURE

    document = read_document(args.file)
    to_delete, to_keep = [], []
    for el in document.elements:
        if args.all or (args.id and match_id(el.id, args.id)) or (args.type and el.type == args.type):
            to_delete.append(el)
        else:
            to_keep.append(el)

    if args.dry_run:
        _json_out({"dryRun": True,
                   "wouldDelete": [{"id": el.id, "type": el.type, "x": el.x, "y": el.y}
                                   for el in to_delete]})
        return EXIT_OK

    if to_delete:
        document.elements = to_keep
        write_document(args.file, document, force=True)

    _json_out({"success": True, "deleted": [el.id for el in to_delete]})
    return EXIT_OK


def _batch_add(document, op: dict) -> dict:
    item = {"x": 0, "y": 0, **{k: v for k, v in op.items() if k != "op"}}
    validate_element_input(item)
    element = create_element(item)
    document.elements.append(element)
    return {"op": "add", "success": True, "id": element.id}


def _batch_modify(document, op: dict) -> dict:
    pattern = op.get("id")
    if not pattern:
        raise InvalidElementError("modify requires id")
    updates = op.get("set")
    if updates is None:
        updates = {k: v for k, v in op.items() if k not in ("op", "id")}
    if not isinstance(updates, dict):
        raise InvalidElementError("set must be an object")

    found = False
    for el in list(document.elements):
        if el.is_deleted or not match_id(el.id, pattern):
            continue
        document.replace_element(merge_element(el, updates))
        found = True
    if not found:
        raise InvalidElementError(f"No element found with id: {pattern}")
    return {"op": "modify", "success": True, "id": pattern}


def _batch_delete(document, op: dict) -> dict:
    pattern = op.get("id")
    deleted = [el.id for el in document.elements
               if op.get("all") or (pattern and match_id(el.id, pattern))]
    document.elements = [el for el in document.elements if el.id not in deleted]
    return {"op": "delete", "success": True, "ids": deleted}


BATCH_OPERATIONS = {
    "add": _batch_add,
    "modify": _batch_modify,
    "delete": _batch_delete,
}


def cmd_batch(args):
    if args.stdin:
        raw = _read_stdin()
    elif args.ops:
        raw = args.ops
    else:
        _json_out({"success": False, "error": "Provide operations via --stdin or --ops"})
        return EXIT_FAILURE

    operations = json.loads(raw)
    if not isinstance(operations, list):
        _json_out({"success": False, "error": "Operations must be an array"})
        return EXIT_FAILURE

    document = read_document(args.file)
    results = []
    for i, op in enumerate(operations, 1):
        name = op.get("op") if isinstance(op, dict) else None
        logger.debug("Operation %d/%d: %s", i, len(operations), name)
        try:
            if not isinstance(op, dict):
                raise InvalidElementError("Operation must be an object")
            handler = BATCH_OPERATIONS.get(name)
            if handler is None:
                raise InvalidElementError(f"Unknown operation: {name}")
            results.append(handler(document, op))
        except ValueError as e:
            # Failed operations are reported and the rest still run
            results.append({"op": name, "success": False, "error": str(e)})

    write_document(args.file, document, force=True)
    success = all(r["success"] for r in results)
    logger.info("Batch applied %d operation(s), %d failed",
                len(results), sum(not r["success"] for r in results))

    _json_out({"success": success, "operations": results, "elementCount": len(document.elements)})
    return EXIT_OK if success else EXIT_FAILURE


# ── Connectors ───────────────────────────────────────────────────────────────

def cmd_connect(args):
    document = read_document(args.file)
    source = find_element(document.elements, args.from_id)
    target = find_element(document.elements, args.to_id)
    if source is None:
        _json_out({"success": False, "error": f"Source element not found: {args.from_id}"})
        return EXIT_FAILURE
    if target is None:
        _json_out({"success": False, "error": f"Target element not found: {args.to_id}"})
        return EXIT_FAILURE

    kind = ElementType.LINE.value if args.style == "line" else ElementType.ARROW.value
    conn = connect(source, target, kind, strokeColor=args.color)

    document.replace_element(conn.source)
    document.replace_element(conn.target)
    document.elements.append(conn.connector)

    label = None
    if args.label:
        (sx, sy), (ex, ey) = conn.start, conn.end
        label = create_element({
            "type": ElementType.TEXT.value,
            "x": (sx + ex) / 2 - 20,
            "y": (sy + ey) / 2 - 10,
            "text": args.label,
            "fontSize": 14,
        })
        document.elements.append(label)

    write_document(args.file, document, force=True)
    _json_out({
        "success": True,
        "connection": {"id": conn.connector.id, "from": conn.source.id,
                       "to": conn.target.id, "type": kind},
        "label": {"id": label.id, "text": args.label} if label else None,
    })
    return EXIT_OK


# ── Compile ──────────────────────────────────────────────────────────────────

def cmd_quick(args):
    logger.info("Creating quick diagram: %s", args.dsl)
    nodes, edges = parse_quick_dsl(args.dsl)
    document = compile_parsed(nodes, edges, direction=args.direction,
                              spacing=args.spacing, style=args.style)
    write_document(args.output, document, force=args.force)

    _json_out({
        "success": True,
        "file": args.output,
        "nodeCount": len(nodes),
        "connectionCount": len(edges),
        "style": args.style,
        "direction": Direction.parse(args.direction).value,
    })
    return EXIT_OK


# ── Validation ───────────────────────────────────────────────────────────────

def cmd_validate(args):
    data = load_json(args.file)
    result = validate_document(data)
    if args.strict:
        result = apply_strict(result)

    if args.json:
        _json_out(result.to_dict())
    else:
        print(format_validation_result(result))
    return EXIT_OK if result.valid else EXIT_FAILURE


# ── Server ───────────────────────────────────────────────────────────────────

def cmd_serve(args):
    import uvicorn

    from .api import app

    uvicorn.run(app, host=args.host, port=args.port)
    return EXIT_OK


# ── Main ─────────────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    from . import config

    parser = argparse.ArgumentParser(prog="sketchflow", description="Sketchflow CLI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output for debugging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress non-essential output")
    sub = parser.add_subparsers(dest="command", required=True)

    # Files
    p = sub.add_parser("create", help="Create a new .excalidraw file")
    p.add_argument("file")
    p.add_argument("--background", default="#ffffff")
    p.add_argument("--grid", type=int, default=None)
    p.add_argument("--force", action="store_true")

    p = sub.add_parser("info", help="Show file metadata and statistics")
    p.add_argument("file")
    p.add_argument("--format", choices=["json", "text"], default="json")

    # Elements
    p = sub.add_parser("add", help="Add elements to a file")
    p.add_argument("file")
    p.add_argument("--type", choices=ELEMENT_TYPES, default=None)
    p.add_argument("--x", type=float, default=None)
    p.add_argument("--y", type=float, default=None)
    p.add_argument("--width", type=float, default=None)
    p.add_argument("--height", type=float, default=None)
    p.add_argument("--data", default=None, help="Element JSON (object or list)")
    p.add_argument("--stdin", action="store_true", help="Read element JSON from stdin")
    p.add_argument("--id", default=None)
    p.add_argument("--stroke", default=None)
    p.add_argument("--fill", default=None)
    p.add_argument("--stroke-width", type=float, default=None)
    p.add_argument("--stroke-style", default=None)
    p.add_argument("--fill-style", default=None)
    p.add_argument("--roughness", type=float, default=None)
    p.add_argument("--opacity", type=float, default=None)
    p.add_argument("--text", default=None)
    p.add_argument("--font-size", type=float, default=None)
    p.add_argument("--font-family", type=int, default=None)
    p.add_argument("--text-align", default=None)
    p.add_argument("--points", default=None, help="Points JSON [[x,y],...]")
    p.add_argument("--start-arrow", default=None)
    p.add_argument("--end-arrow", default=None)
    p.add_argument("--start-binding", default=None, help="Bind start to element ID")
    p.add_argument("--end-binding", default=None, help="Bind end to element ID")
    p.add_argument("--label", default=None, help="Centered label text for shapes")
    p.add_argument("--label-size", type=float, default=16)
    p.add_argument("--center-in", default=None, help="Center a new text element within this element")

    p = sub.add_parser("list", help="List elements")
    p.add_argument("file")
    p.add_argument("--type", default=None)
    p.add_argument("--id", default=None, help="ID pattern (supports * glob)")
    p.add_argument("--format", choices=["json", "table", "ids"], default="json")
    p.add_argument("--brief", action="store_true")

    p = sub.add_parser("modify", help="Modify elements")
    p.add_argument("file")
    p.add_argument("--id", required=True, help="ID pattern (supports * glob)")
    p.add_argument("--set", action="append", default=None, help="key=value, repeatable")
    p.add_argument("--data", default=None, help="Update JSON object")
    p.add_argument("--move", default=None, help="Relative move dx,dy")
    p.add_argument("--moveto", default=None, help="Absolute position x,y")
    p.add_argument("--resize", default=None, help="New size w,h")
    p.add_argument("--rotate", type=float, default=None, help="Rotation in degrees")
    p.add_argument("--stdin", action="store_true", help="Read update JSON from stdin")

    p = sub.add_parser("delete", help="Delete elements")
    p.add_argument("file")
    p.add_argument("--id", default=None)
    p.add_argument("--type", default=None)
    p.add_argument("--all", action="store_true")
    p.add_argument("--dry-run", action="store_true")

    p = sub.add_parser("batch", help="Apply add/modify/delete operations in one pass")
    p.add_argument("file")
    p.add_argument("--ops", default=None, help="Operations JSON array")
    p.add_argument("--stdin", action="store_true", help="Read operations from stdin")

    # Connectors
    p = sub.add_parser("connect", help="Connect two elements with an arrow or line")
    p.add_argument("file")
    p.add_argument("--from", dest="from_id", required=True)
    p.add_argument("--to", dest="to_id", required=True)
    p.add_argument("--style", choices=["arrow", "line"], default="arrow")
    p.add_argument("--label", default=None)
    p.add_argument("--color", default="#1e1e1e")

    # Compile
    p = sub.add_parser("quick", help="Create a diagram from quick DSL")
    p.add_argument("dsl", help='e.g. "[Start] -> [Process] -> {Decision?} -> [End]"')
    p.add_argument("-o", "--output", required=True)
    p.add_argument("-d", "--direction", choices=["horizontal", "vertical", "h", "v"],
                   default="horizontal")
    p.add_argument("-s", "--spacing", type=float, default=100)
    p.add_argument("--style", choices=sorted(PRESETS), default="default")
    p.add_argument("-f", "--force", action="store_true")

    # Validation
    p = sub.add_parser("validate", help="Validate a file against the Excalidraw schema")
    p.add_argument("file")
    p.add_argument("--strict", action="store_true", help="Treat warnings as errors")
    p.add_argument("--json", action="store_true", help="Output as JSON")

    # Server
    p = sub.add_parser("serve", help="Run the HTTP API")
    p.add_argument("--host", default=config.API_HOST)
    p.add_argument("--port", type=int, default=config.API_PORT)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        setup_logging("DEBUG")
    elif args.quiet:
        setup_logging("ERROR")
    else:
        setup_logging()

    cmd_map = {
        "create": cmd_create,
        "info": cmd_info,
        "add": cmd_add,
        "list": cmd_list,
        "modify": cmd_modify,
        "delete": cmd_delete,
        "batch": cmd_batch,
        "connect": cmd_connect,
        "quick": cmd_quick,
        "validate": cmd_validate,
        "serve": cmd_serve,
    }

    try:
        return cmd_map[args.command](args)
    except DocumentNotFoundError as e:
        _json_out({"success": False, "error": str(e)})
        return EXIT_NOT_FOUND
    except (InvalidJsonError, json.JSONDecodeError) as e:
        _json_out({"success": False, "error": str(e)})
        return EXIT_INVALID_JSON
    except (InvalidDocumentError, InvalidElementError, ValidationError) as e:
        _json_out({"success": False, "error": str(e)})
        return EXIT_INVALID_INPUT
    except (DocumentExistsError, EmptyDiagramError) as e:
        _json_out({"success": False, "error": str(e)})
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
