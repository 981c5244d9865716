import argparse
import dataclasses
import logging
import os
import sys
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import tqdm

from config import ClientConfig
from document_client import DocumentClient
from exceptions import ConfigurationError, CrptError
from models import Document
from time_unit import TimeUnit
from utils import _load_json_file, write_json_atomic

# Configure logging
logger = logging.getLogger(__name__)
log_level = logging.DEBUG if os.getenv("DEBUG") else logging.INFO


class SuppressTransportErrorFilter(logging.Filter):
    """Drops crpt_api_client HTTP error logs unless in debug mode; failures are reported per document."""

    def filter(self, record: logging.LogRecord) -> bool:
        if log_level == logging.DEBUG:
            return True
        return not ("crpt_api_client" in record.name and record.levelno >= logging.ERROR)


SubmitResult = Tuple[str, bool, Optional[object], Optional[str]]


def load_documents(paths: Sequence[str]) -> List[Tuple[str, Document]]:
    """Reads each file as one document JSON object."""
    return [(path, Document.from_dict(_load_json_file(path))) for path in paths]


def submit_documents(
    client: DocumentClient,
    documents: List[Tuple[str, Document]],
    signature: str,
    max_workers: int = 4,
) -> List[SubmitResult]:
    """Submits documents concurrently through one shared client.

    Returns:
        One (path, ok, response, error) row per document, in input order.
    """

    def _submit(path: str, document: Document) -> SubmitResult:
        try:
            response = client.create_document(document, signature)
            return path, True, response, None
        except CrptError as e:
            logger.error("Failed to submit %s: %s", path, e)
            return path, False, None, str(e)

    results: dict[int, SubmitResult] = {}
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_map = {executor.submit(_submit, path, doc): i for i, (path, doc) in enumerate(documents)}
        for fut in tqdm.tqdm(
            as_completed(future_map),
            total=len(future_map),
            desc="Submitting documents",
            unit="doc",
            dynamic_ncols=True,
        ):
            results[future_map[fut]] = fut.result()
    return [results[i] for i in range(len(documents))]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Submit introduce-goods documents to the CRPT API"
    )
    parser.add_argument("documents", nargs="+", help="Document JSON files")
    parser.add_argument(
        "--signature-file",
        required=True,
        help="File holding the base64 detached signature of the documents",
    )
    parser.add_argument(
        "--time-unit",
        choices=[unit.name for unit in TimeUnit],
        help="Rate limit window (default: CRPT_TIME_UNIT or SECONDS)",
    )
    parser.add_argument(
        "--request-limit",
        type=int,
        help="Requests allowed per window (default: CRPT_REQUEST_LIMIT or 10)",
    )
    parser.add_argument("--workers", type=int, default=4, help="Concurrent submitters")
    parser.add_argument("--output", help="Write a JSON report of the results here")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the script."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=log_level)
    logging.getLogger("crpt_api_client").addFilter(SuppressTransportErrorFilter())

    try:
        config = ClientConfig.from_env()
        if args.time_unit is not None:
            config = dataclasses.replace(config, time_unit=TimeUnit.parse(args.time_unit))
        if args.request_limit is not None:
            config = dataclasses.replace(config, request_limit=args.request_limit)
        client = DocumentClient.from_config(config)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return 2

    try:
        signature = Path(args.signature_file).read_text(encoding="utf-8").strip()
        documents = load_documents(args.documents)
    except (OSError, CrptError) as e:
        logger.error("Failed to read input: %s", e)
        client.close()
        return 2

    with client:
        results = submit_documents(client, documents, signature, max_workers=args.workers)

    ok = [r for r in results if r[1]]
    failed = [r for r in results if not r[1]]
    logger.info("Summary:")
    logger.info("- Documents submitted: %d", len(ok))
    logger.info("- Documents failed: %d", len(failed))
    for path, _ok, _resp, error in failed:
        logger.info("- %s: %s", path, error)

    if args.output:
        write_json_atomic(args.output, [
            {"file": path, "ok": success, "response": response, "error": error}
            for path, success, response, error in results
        ])
        logger.info("Wrote %d results to: %s", len(results), args.output)

    return 0 if not failed else 1


if __name__ == "__main__":
    sys.exit(main())
