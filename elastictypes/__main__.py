"""
elastictypes command line interface: show and send elasticsearch mappings, generate endpoint functions
"""

import argparse
import asyncio
import importlib
import inspect
import json
import logging
import sys
from typing import Any

from elastictypes.client import create_index, put_mapping
from elastictypes.codegen import render_module, write_module
from elastictypes.config import ENV_PREFIX, get_settings
from elastictypes.connection import elastic_connection
from elastictypes.derive import index_name
from elastictypes.endpoints import load_spec
from elastictypes.mapping import document_mapping, field_mapping


def load_target(target: str) -> Any:
    """Import MODULE:NAME (e.g. myproject.models:Article)"""
    module_name, sep, name = target.partition(":")
    if not sep or not module_name or not name:
        raise argparse.ArgumentTypeError(f"Expected MODULE:NAME, not {target!r}")
    module = importlib.import_module(module_name)
    try:
        return getattr(module, name)
    except AttributeError:
        raise argparse.ArgumentTypeError(f"Module {module_name} has no attribute {name}")


def show_mapping(args):
    if args.field:
        mapping = field_mapping(args.target)
    else:
        mapping = document_mapping(args.target)
    print(json.dumps(mapping, indent=args.indent))


def codegen(args):
    endpoints = load_spec(args.spec)
    logging.info(f"Read {len(endpoints)} endpoint(s) from {args.spec}")
    if args.output:
        write_module(endpoints, args.output)
    else:
        sys.stdout.write(render_module(endpoints))


async def send_mapping(args):
    index = args.index or index_name(args.target)
    async with elastic_connection():
        if args.create:
            await create_index(args.target, index=index)
            logging.info(f"Created index {index} with the mapping of {args.target.__name__}")
        else:
            await put_mapping(args.target, index=index)
            logging.info(f"Updated the mapping of index {index} to {args.target.__name__}")


def show_config(args):
    settings = get_settings()
    for fieldname, fieldinfo in type(settings).model_fields.items():
        value = getattr(settings, fieldname)
        if doc := fieldinfo.description:
            print(f"# {doc}")
        if value is None:
            print(f"#{ENV_PREFIX}{fieldname}=\n")
        else:
            print(f"{ENV_PREFIX}{fieldname}={value}\n")


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__, prog="python -m elastictypes")

    subparsers = parser.add_subparsers(dest="action", title="action", help="Action to perform:", required=True)
    p = subparsers.add_parser("mapping", help="Print the mapping of a document type")
    p.add_argument("target", type=load_target, help="The document type or mapping, as MODULE:CLASS")
    p.add_argument("--field", action="store_true", help="Print the mapping as a field rather than as a document")
    p.add_argument("--indent", type=int, default=2, help="Indentation of the json output")
    p.set_defaults(func=show_mapping)

    p = subparsers.add_parser("codegen", help="Generate endpoint functions from the elasticsearch REST API spec")
    p.add_argument("spec", help="A REST API spec json file, or a directory of spec files")
    p.add_argument("-o", "--output", help="The python file to write (default: print to stdout)")
    p.set_defaults(func=codegen)

    p = subparsers.add_parser("put-mapping", help="Send the mapping of a document type to elasticsearch")
    p.add_argument("target", type=load_target, help="The document type, as MODULE:CLASS")
    p.add_argument("--index", help="The index to use (default: the index of the document type)")
    p.add_argument("--create", action="store_true", help="Create the index rather than updating its mapping")
    p.set_defaults(func=send_mapping)

    p = subparsers.add_parser("config", help="Print the elastictypes settings as environment variables")
    p.set_defaults(func=show_config)

    args = parser.parse_args(argv)

    logging.basicConfig(format="[%(levelname)-7s:%(name)-15s] %(message)s", level=logging.INFO)
    es_logger = logging.getLogger("elasticsearch")
    es_logger.setLevel(logging.WARNING)

    if inspect.iscoroutinefunction(args.func):
        asyncio.run(args.func(args))
    else:
        args.func(args)


if __name__ == "__main__":
    main()
