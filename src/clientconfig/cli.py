"""Command line entry point."""

import argparse
import json
import logging
import sys
from typing import List, Optional

from clientconfig.client.builder import ClientConfigMapper
from clientconfig.config.loader import ConfigLoader
from clientconfig.config.properties import PropertyTable
from clientconfig.config.settings import ResolverSettings
from clientconfig.exceptions.config import ConfigError
from clientconfig.utils.logging import configure_logging


EXIT_OK = 0
EXIT_USAGE = 1
EXIT_CONFIG_ERROR = 2


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the clientconfig CLI."""
    parser = argparse.ArgumentParser(
        prog='clientconfig',
        description='Resolve client configuration documents and their imports'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    resolve_parser = subparsers.add_parser('resolve', help='Resolve a configuration document')
    resolve_parser.add_argument(
        'config',
        nargs='?',
        help='Path, URL, or classpath: reference of the root document (default: lookup order)'
    )
    resolve_parser.add_argument(
        '-D', '--property',
        action='append',
        default=[],
        metavar='KEY=VALUE',
        help='Property for ${...} substitution (can be specified multiple times)'
    )
    resolve_parser.add_argument(
        '--properties-file',
        type=str,
        help='YAML file with properties (nested keys joined with dots)'
    )
    resolve_parser.add_argument(
        '--no-env',
        action='store_true',
        help='Do not fall back to environment variables for properties'
    )
    resolve_parser.add_argument(
        '--strict',
        action='store_true',
        help='Fail on placeholders without a value'
    )
    resolve_parser.add_argument(
        '--format',
        choices=['xml', 'json'],
        default='xml',
        help='Print the resolved XML or the typed client config as JSON'
    )
    resolve_parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    return parser


def build_properties(args: argparse.Namespace) -> PropertyTable:
    """Layer -D pairs over the properties file over the environment."""
    layers = [PropertyTable.from_pairs(args.property)]
    if args.properties_file:
        layers.append(PropertyTable.from_yaml(args.properties_file))
    table = layers[0].layered(*layers[1:])
    if not args.no_env:
        table = table.layered(PropertyTable.from_environment())
    return table


def resolve_command(args: argparse.Namespace) -> int:
    settings = ResolverSettings(strict_placeholders=True) if args.strict else ResolverSettings()
    loader = ConfigLoader(settings=settings)
    properties = build_properties(args)

    if args.config:
        resolved = loader.load_reference(args.config, properties)
    else:
        resolved = loader.load_default(properties)

    if args.format == 'json':
        config = ClientConfigMapper().map(resolved)
        print(config.model_dump_json(indent=2))
    else:
        print(resolved.to_xml())
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_USAGE

    configure_logging(level=logging.DEBUG if args.debug else logging.WARNING)

    try:
        return resolve_command(args)
    except ConfigError as e:
        print(json.dumps(e.to_dict(), default=str), file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE


if __name__ == '__main__':
    sys.exit(main())
