import argparse
import json
import logging
import sys
from pathlib import Path

from tqdm import tqdm

from referee import config
from referee.entities import EntityLoadError
from referee.fetcher import DocumentFetcher
from referee.referee import Referee
from referee.schema import CandidateValidationError, load_schema, validate_candidates
from referee.utils import normalize_entity_id

logger = logging.getLogger(__name__)


def read_entity_ids(args):
    """Collect ids from the command line and an optional file (plain lines or JSONL with an "id"/"qid" key)."""
    ids = list(args.entities or [])
    if args.input:
        with open(Path(args.input), "r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if not line:
                    continue
                if line.startswith("{"):
                    try:
                        record = json.loads(line)
                    except json.JSONDecodeError:
                        continue
                    line = record.get("qid") or record.get("id") or ""
                ids.append(line)
    ordered = []
    seen = set()
    for entity_id in ids:
        entity_id = normalize_entity_id(entity_id)
        if entity_id and entity_id not in seen:
            seen.add(entity_id)
            ordered.append(entity_id)
    return ordered


def build_record(entity_id, candidates, with_reference, schema):
    serialized = [candidate.to_dict() for candidate in candidates]
    validate_candidates(serialized, schema=schema)
    if with_reference:
        for payload, candidate in zip(serialized, candidates):
            payload["reference"] = candidate.as_reference()
    return {"entity": entity_id, "candidates": serialized}


def run(args):
    entity_ids = read_entity_ids(args)
    if not entity_ids:
        logger.error("[!] No entity ids given.")
        return 2
    schema = load_schema()
    out = open(args.output, "a", encoding="utf-8") if args.output else sys.stdout
    failures = 0
    try:
        iterator = tqdm(entity_ids, desc="Finding references", unit="item") if len(entity_ids) > 1 else entity_ids
        for entity_id in iterator:
            referee = Referee(
                fetcher=DocumentFetcher(timeout=args.timeout),
                max_workers=args.max_workers,
            )
            try:
                candidates = referee.get_potential_references(entity_id)
            except EntityLoadError as exc:
                failures += 1
                logger.error("[!] %s: %s", entity_id, exc)
                continue
            try:
                record = build_record(entity_id, candidates, args.with_reference, schema)
            except CandidateValidationError as exc:
                failures += 1
                logger.error("[!] %s: %s %s", entity_id, exc, exc.details.get("message", ""))
                continue
            out.write(json.dumps(record, ensure_ascii=False))
            out.write("\n")
            out.flush()
    finally:
        if out is not sys.stdout:
            out.close()
    return 1 if failures else 0


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Find candidate references for unreferenced Wikidata statements.")
    parser.add_argument("entities", nargs="*", help="Item ids such as Q42.")
    parser.add_argument(
        "--input",
        type=str,
        default=None,
        help="File with one item id per line (or JSONL records carrying a qid/id field).",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Append JSONL results here instead of printing to stdout.",
    )
    parser.add_argument(
        "--with-reference",
        action="store_true",
        help="Attach a ready-made Wikibase reference block to every candidate.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=config.FETCH_TIMEOUT,
        help="Seconds to wait for each candidate page.",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=config.FETCH_MAX_WORKERS,
        help="Upper bound on simultaneous page fetches.",
    )
    parser.add_argument("--log-level", type=str, default="INFO", help="Logging level (DEBUG, INFO, WARNING...).")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
