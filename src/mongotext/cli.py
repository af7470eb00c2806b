"""
Command-line front end: run one database or collection operation with JSON text arguments.

Examples:
    mongotext -d test find --collection people '{"age": {"$gte": 30}}'
    mongotext -d test update-one -c people '{"name": "Ann"}' '{"$set": {"age": 31}}'
    mongotext -d test run-command '{"ping": 1}'
"""

import argparse
import asyncio
import logging
import sys
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError
from pymongo.results import DeleteResult, InsertManyResult, InsertOneResult, UpdateResult

from .client import MongoTextClient
from .codec import decode_command, decode_document, decode_documents, decode_value, encode
from .config import Config
from .exceptions import MongoTextError

logger = logging.getLogger(__name__)

# operation -> (method name, positional argument names)
# A trailing "?" marks an argument that may be left out; the method's default ("{}") applies
DATABASE_OPERATIONS: Dict[str, Tuple[str, Tuple[str, ...]]] = {
    'run-command': ('run_command', ('command',)),
    'list-collections': ('list_collections', ('filter?',)),
    'list-collection-names': ('list_collection_names', ('filter?',)),
    'drop-database': ('drop', ()),
}

COLLECTION_OPERATIONS: Dict[str, Tuple[str, Tuple[str, ...]]] = {
    'count': ('count_documents', ('filter?',)),
    'estimated-count': ('estimated_document_count', ()),
    'find': ('find', ('filter?',)),
    'find-one': ('find_one', ('filter?',)),
    'find-one-and-delete': ('find_one_and_delete', ('filter',)),
    'find-one-and-replace': ('find_one_and_replace', ('filter', 'replacement')),
    'find-one-and-update': ('find_one_and_update', ('filter', 'update')),
    'insert-one': ('insert_one', ('document',)),
    'insert-many': ('insert_many', ('documents',)),
    'update-one': ('update_one', ('filter', 'update')),
    'update-many': ('update_many', ('filter', 'update')),
    'update-by-id': ('update_by_id', ('id', 'update')),
    'replace-one': ('replace_one', ('filter', 'replacement')),
    'delete-one': ('delete_one', ('filter',)),
    'delete-many': ('delete_many', ('filter',)),
    'distinct': ('distinct', ('field', 'filter?')),
    'drop': ('drop', ()),
}

# argument name -> decoder used to check its text before connecting
ARGUMENT_DECODERS = {
    'command': decode_command,
    'filter': decode_document,
    'update': decode_document,
    'replacement': decode_document,
    'document': decode_document,
    'documents': decode_documents,
}


def positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog='mongotext',
        description="Run a MongoDB operation whose filter/update/document arguments are JSON text",
    )
    p.add_argument('--config', default='', help="JSON config file (mongo_uri, db_name, connect_timeout, log_level)")
    p.add_argument('--uri', default=None, help="MongoDB connection URI, overrides the config")
    p.add_argument('--timeout', type=positive_float, default=None, help="Connect timeout in seconds")
    p.add_argument('-d', '--database', default=None, help="Database name, defaults to db_name from the config")
    p.add_argument('-c', '--collection', default=None, help="Collection name, required for collection operations")
    p.add_argument('--indent', type=int, default=None, help="Indent the JSON output")
    p.add_argument(
        'operation',
        choices=sorted(list(DATABASE_OPERATIONS) + list(COLLECTION_OPERATIONS)),
        help="Operation to run",
    )
    p.add_argument('arguments', nargs='*', help="Operation arguments as JSON text")
    return p


def result_to_document(result: Any) -> Any:
    """Turn driver result records into plain documents for output"""
    if isinstance(result, InsertOneResult):
        return {'inserted_id': result.inserted_id}
    if isinstance(result, InsertManyResult):
        return {'inserted_ids': result.inserted_ids}
    if isinstance(result, UpdateResult):
        return {
            'matched_count': result.matched_count,
            'modified_count': result.modified_count,
            'upserted_id': result.upserted_id,
        }
    if isinstance(result, DeleteResult):
        return {'deleted_count': result.deleted_count}
    if result is None:
        return {'ok': 1}
    return result


def _bind_arguments(
    parser: argparse.ArgumentParser, operation: str, names: Sequence[str], values: List[str]
) -> List[Any]:
    required = [n for n in names if not n.endswith('?')]
    if len(values) < len(required) or len(values) > len(names):
        usage = ' '.join(f"[{n[:-1]}]" if n.endswith('?') else n for n in names)
        parser.error(f"{operation} takes arguments: {usage or '(none)'}")

    # Decode every text argument up front so malformed text fails before connecting.
    # The handles take text, so the text itself is passed on, except for the typed id
    bound: List[Any] = list(values)
    for index, (name, value) in enumerate(zip(names, values)):
        name = name.rstrip('?')
        if name == 'id':
            bound[index] = decode_value(value)
        elif name in ARGUMENT_DECODERS:
            ARGUMENT_DECODERS[name](value)
    return bound


def resolve_operation(args: argparse.Namespace, parser: argparse.ArgumentParser) -> Tuple[str, List[Any]]:
    """Check the operation's arguments and return (method name, bound arguments)"""
    if args.operation in COLLECTION_OPERATIONS:
        if not args.collection:
            parser.error(f"{args.operation} needs --collection")
        method_name, names = COLLECTION_OPERATIONS[args.operation]
    else:
        method_name, names = DATABASE_OPERATIONS[args.operation]
    return method_name, _bind_arguments(parser, args.operation, names, args.arguments)


async def run(args: argparse.Namespace, method_name: str, bound: List[Any]) -> Any:
    async with MongoTextClient(args.uri, args.timeout) as client:
        db = client.use(args.database)
        target = db.collection(args.collection) if args.operation in COLLECTION_OPERATIONS else db
        logger.debug(f"Running {args.operation} on {target!r}")
        return await getattr(target, method_name)(*bound)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        Config.initialize(args.config)
    except ValidationError as e:
        parser.error(f"invalid configuration: {e}")
    logging.basicConfig(level=Config.log_level(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        method_name, bound = resolve_operation(args, parser)
        result = asyncio.run(run(args, method_name, bound))
    except MongoTextError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(encode(result_to_document(result), indent=args.indent))
    return 0


if __name__ == "__main__":
    sys.exit(main())
