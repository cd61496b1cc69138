"""Process summary JSON → BPMN converter.

Usage:
    processdoc-bpmn summary.json [output.bpmn] [--markdown output.md] [--verbose]
"""

from __future__ import annotations

import argparse
import json
import sys
import xml.etree.ElementTree as ET
from pathlib import Path

from .bpmn_generator import generate_bpmn_xml
from .export import sanitize_title
from .markdown import generate_fallback_markdown
from .schemas import ProcessSummary, SummaryValidationError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='processdoc-bpmn',
        description='Convert a process summary (JSON) to a BPMN 2.0 diagram',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='Example: processdoc-bpmn summary.json invoice-approval.bpmn --markdown invoice-approval.md',
    )
    parser.add_argument('input', help='Input summary .json file path')
    parser.add_argument('output', nargs='?', help='Output .bpmn file path (default: derived from process name)')
    parser.add_argument('--markdown', '-m', help='Also write fallback Markdown to this path')
    parser.add_argument('--verbose', '-v', action='store_true', help='Show parsed steps')
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # Read input
    try:
        with open(args.input, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f'ERROR: cannot read {args.input}: {e}', file=sys.stderr)
        return 2

    # Validate
    try:
        summary = ProcessSummary.from_dict(data)
    except SummaryValidationError as e:
        print(f'ERROR: invalid summary: {e}', file=sys.stderr)
        return 2
    print(f'Parsed: "{summary.process_name}", {len(summary.steps)} steps')

    if args.verbose:
        print('\n--- Steps ---')
        for i, step in enumerate(summary.steps):
            print(f'  [{step.type:10s}] #{i + 1:<3d} id={step.id!r}  name="{step.name}"')
            for c in step.conditions:
                print(f'      -> [{c.condition}] {c.next_step}')

    # Generate BPMN
    bpmn = generate_bpmn_xml(summary)
    output = Path(args.output or f'{sanitize_title(summary.process_name)}.bpmn')
    output.write_text(bpmn, encoding='utf-8')

    # Validate
    try:
        ET.fromstring(bpmn.encode('utf-8'))
        print(f'\nOutput: {output} (valid XML)')
    except ET.ParseError as e:
        print(f'\nWARNING: XML validation failed: {e}')

    if args.markdown:
        Path(args.markdown).write_text(generate_fallback_markdown(summary), encoding='utf-8')
        print(f'Markdown: {args.markdown}')

    print('Done!')
    return 0


if __name__ == '__main__':
    sys.exit(main())
