"""
HubSpot Property Tool - command line interface

Create mode:
  template     write an example property CSV
  parse-csv    validate a property CSV
  create       bulk-create properties from a CSV
  create-one   create a single property

Manage mode:
  objects      list standard and custom object types
  list         list properties of an object type
  scan         scan workflows, forms, lists, pipelines, emails and reports
  count        live record count for one or more properties
  delete       delete properties
  report       property list + usage scan (+ record counts) exported to CSV/JSON/HTML
"""
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict

from .api.hubspot_client import HubSpotAPIClient, create_client_from_config
from .analyzers.aggregator import UsageAggregator
from .analyzers.usage import build_usage_records, usage_stats
from .analyzers import output
from .analyzers.html_builder import build_html_report
from .errors import HubSpotToolError, CSVValidationError, HubSpotAPIError
from .properties.bulk_creator import BulkCreator, create_property
from .properties.csv_loader import load_property_csv, write_template
from .properties.definitions import PropertyRow, PROPERTY_TYPES, to_internal_name
from .properties.manager import PropertyManager
from .utils.config import load_config, require_token
from .utils.file_helpers import get_account_report_dir
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _client(config: Dict[str, Any]) -> HubSpotAPIClient:
    return create_client_from_config(config, token=require_token(config))


def cmd_template(args, config):
    path = write_template(Path(args.output))
    print(f"Template written to {path}")
    return 0


def cmd_parse_csv(args, config):
    try:
        rows = load_property_csv(args.file)
    except CSVValidationError as e:
        _print_json({'success': False, 'errors': e.errors})
        return 1

    _print_json({'success': True, 'data': [r.to_dict() for r in rows], 'count': len(rows)})
    return 0


def cmd_create(args, config):
    try:
        rows = load_property_csv(args.file)
    except CSVValidationError as e:
        _print_json({'success': False, 'errors': e.errors})
        return 1

    client = _client(config)
    group = PropertyManager(client).resolve_group(args.object_type, args.group)

    creator = BulkCreator(client, args.object_type, group,
                          delay=float(config['throttle']['create_delay']))
    result = creator.create_all(rows)

    _print_json(result.to_dict())
    return 0 if result.failed == 0 else 1


def cmd_create_one(args, config):
    if not to_internal_name(args.name):
        _print_json({'success': False,
                     'error': f'"{args.name}" does not produce a valid internal name'})
        return 1

    client = _client(config)
    group = PropertyManager(client).resolve_group(args.object_type, args.group)
    row = PropertyRow(name=args.name, type=args.type,
                      description=args.description or '', options=args.options or '')

    try:
        created = create_property(client, args.object_type, row, group)
    except HubSpotAPIError as e:
        _print_json({'success': False, 'error': str(e), 'statusCode': e.status_code})
        return 1

    _print_json({'success': True, 'internalName': created.get('name'),
                 'label': created.get('label')})
    return 0


def cmd_objects(args, config):
    manager = PropertyManager(_client(config))
    _print_json(manager.list_object_types())
    return 0


def cmd_list(args, config):
    manager = PropertyManager(_client(config))
    properties = manager.list_properties(args.object_type)
    if args.custom_only:
        properties = [p for p in properties if not p.hubspot_defined]
    _print_json([p.to_dict() for p in properties])
    return 0


def cmd_scan(args, config):
    raw_dir = Path(args.save_raw) if args.save_raw else None
    scan = UsageAggregator(_client(config), raw_output_dir=raw_dir).scan()

    if args.output:
        output.save_scan_json(scan, Path(args.output))
    _print_json(scan.to_dict())
    return 0


def cmd_count(args, config):
    manager = PropertyManager(_client(config))
    counts = manager.count_all(args.object_type, args.property,
                               delay=float(config['throttle']['count_delay']))
    _print_json([
        {'name': c.property_name, 'count': c.count, 'error': c.error}
        for c in counts
    ])
    return 0 if all(c.ok for c in counts) else 1


def cmd_delete(args, config):
    manager = PropertyManager(_client(config))
    known = {p.name: p for p in manager.list_properties(args.object_type)}

    targets = []
    missing = []
    for name in args.property:
        if name in known:
            targets.append(known[name])
        else:
            missing.append(name)

    for name in missing:
        logger.warning(f"Property not found on {args.object_type}: {name}")

    if not targets:
        _print_json({'deleted': 0, 'failed': len(missing), 'results': []})
        return 1

    if not args.yes:
        names = ', '.join(p.name for p in targets)
        answer = input(f"Delete {len(targets)} properties from {args.object_type} ({names})? [y/N] ")
        if answer.strip().lower() not in ('y', 'yes'):
            print("Cancelled")
            return 1

    results = manager.delete_many(args.object_type, targets)
    deleted = sum(1 for r in results if r.success)
    _print_json({
        'deleted': deleted,
        'failed': len(results) - deleted + len(missing),
        'results': [
            {'name': r.property_name, 'success': r.success, 'error': r.error}
            for r in results
        ] + [
            {'name': name, 'success': False, 'error': 'Property not found'}
            for name in missing
        ],
    })
    return 0 if deleted == len(args.property) else 1


def cmd_report(args, config):
    client = _client(config)
    manager = PropertyManager(client)

    properties = manager.list_properties(args.object_type)
    if not args.include_hubspot:
        properties = [p for p in properties if not p.hubspot_defined]

    scan = UsageAggregator(client).scan()

    counts = None
    if args.with_counts:
        logger.info(f"Counting records for {len(properties)} properties...")
        counts = manager.count_all(args.object_type, [p.name for p in properties],
                                   delay=float(config['throttle']['count_delay']))

    records = build_usage_records(properties, scan, counts)
    summary = output.build_summary(records, scan, args.object_type)

    report_dir = Path(args.output_dir) if args.output_dir else \
        get_account_report_dir(args.account or 'default', Path(config['output']['report_dir']))
    stem = f'{args.object_type}_property_usage'

    output.export_usage_csv(records, report_dir / f'{stem}.csv', unused_only=args.unused_only)
    output.save_summary_json(summary, report_dir / f'{stem}.json')
    html_path = build_html_report(records, summary, report_dir / f'{stem}.html',
                                  account_name=args.account or 'HubSpot')

    stats = usage_stats(records)
    logger.info("=" * 60)
    logger.info("REPORT COMPLETE")
    logger.info("=" * 60)
    logger.info(f"Object type: {args.object_type}")
    logger.info(f"Total properties: {stats['total_properties']}")
    logger.info(f"Used: {stats['used_properties']}")
    logger.info(f"Unused: {stats['unused_properties']}")
    logger.info(f"HTML report: {html_path}")

    _print_json({'stats': stats, 'warnings': summary['warnings'],
                 'output_dir': str(report_dir)})
    return 0


COMMANDS = {
    'template': cmd_template,
    'parse-csv': cmd_parse_csv,
    'create': cmd_create,
    'create-one': cmd_create_one,
    'objects': cmd_objects,
    'list': cmd_list,
    'scan': cmd_scan,
    'count': cmd_count,
    'delete': cmd_delete,
    'report': cmd_report,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='hubspot-props',
        description='Bulk-create and audit HubSpot custom properties',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Validate and create properties from a CSV
  hubspot-props parse-csv properties.csv
  hubspot-props --account acme create properties.csv --object-type contacts

  # Find unused custom contact properties
  hubspot-props --account acme report --object-type contacts --with-counts --unused-only
        """
    )

    parser.add_argument('--account', help='Account name (reads config/<account>.yaml)')
    parser.add_argument('--config-dir', type=Path, default=Path('config'),
                        help='Configuration directory (default: config/)')
    parser.add_argument('--token', help='HubSpot private app token (overrides config/env)')
    parser.add_argument('--log-level', help='Logging level (default from config, INFO)')

    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('template', help='Write an example property CSV')
    p.add_argument('--output', default='hubspot-properties-template.csv')

    p = sub.add_parser('parse-csv', help='Validate a property CSV')
    p.add_argument('file')

    p = sub.add_parser('create', help='Bulk-create properties from a CSV')
    p.add_argument('file')
    p.add_argument('--object-type', default='contacts')
    p.add_argument('--group', help='Property group (resolved automatically if omitted)')

    p = sub.add_parser('create-one', help='Create a single property')
    p.add_argument('--name', required=True, help='Display label')
    p.add_argument('--type', required=True, choices=list(PROPERTY_TYPES.keys()))
    p.add_argument('--description', default='')
    p.add_argument('--options', default='', help='Semicolon-separated options')
    p.add_argument('--object-type', default='contacts')
    p.add_argument('--group')

    sub.add_parser('objects', help='List object types')

    p = sub.add_parser('list', help='List properties of an object type')
    p.add_argument('--object-type', default='contacts')
    p.add_argument('--custom-only', action='store_true', help='Skip HubSpot-defined properties')

    p = sub.add_parser('scan', help='Scan content sources for property references')
    p.add_argument('--output', help='Save the scan result as JSON')
    p.add_argument('--save-raw', help='Directory to save raw fetched items')

    p = sub.add_parser('count', help='Live record count per property')
    p.add_argument('--object-type', default='contacts')
    p.add_argument('property', nargs='+')

    p = sub.add_parser('delete', help='Delete properties')
    p.add_argument('--object-type', default='contacts')
    p.add_argument('--yes', action='store_true', help='Do not ask for confirmation')
    p.add_argument('property', nargs='+')

    p = sub.add_parser('report', help='Full usage report for an object type')
    p.add_argument('--object-type', default='contacts')
    p.add_argument('--with-counts', action='store_true', help='Also count records (slow)')
    p.add_argument('--unused-only', action='store_true', help='CSV lists unused properties only')
    p.add_argument('--include-hubspot', action='store_true',
                   help='Include HubSpot-defined properties')
    p.add_argument('--output-dir', help='Report directory (default: reports/<account>/)')

    return parser


def main(argv=None) -> int:
    """Command-line interface"""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.account, args.config_dir, token=args.token)
    except HubSpotToolError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    log_level = args.log_level or config['output'].get('log_level', 'INFO')
    log_dir = config['output'].get('log_dir') if args.command not in ('template', 'parse-csv') else None
    setup_logging(log_dir=Path(log_dir) if log_dir else None, log_level=log_level)

    try:
        return COMMANDS[args.command](args, config)
    except KeyboardInterrupt:
        print("\n\nCancelled by user", file=sys.stderr)
        return 1
    except HubSpotAPIError as e:
        logger.error(f"HubSpot API error ({e.status_code}): {e}")
        return 1
    except HubSpotToolError as e:
        logger.error(str(e))
        return 1


if __name__ == '__main__':
    sys.exit(main())
