from __future__ import annotations

import argparse
import json
import sys
from typing import Optional

from .bootstrap import load_bot, load_bot_with_summary
from .classifier import BACKENDS, train_classifier
from .config import Settings
from .errors import ClassificationError, ModelLoadError, StorageError
from .ingest import load_dataset, summarize_dataset
from .repository import AnswerRepository

EXIT_OK = 0
EXIT_MODEL_ERROR = 1
EXIT_STORAGE_ERROR = 2
EXIT_CLASSIFICATION_ERROR = 3
EXIT_DATASET_ERROR = 4

_QUIT_WORDS = {"exit", "quit"}


def _cmd_ask(args: argparse.Namespace, settings: Settings) -> int:
    bot = load_bot(settings)
    try:
        print(bot.answer(args.question, debug=args.debug))
    finally:
        bot.repository.dispose()
    return EXIT_OK


def _cmd_chat(args: argparse.Namespace, settings: Settings) -> int:
    bot = load_bot(settings)
    try:
        for line in sys.stdin:
            question = line.strip()
            if not question:
                continue
            if question.lower() in _QUIT_WORDS:
                break
            print(bot.answer(question, debug=args.debug), flush=True)
    finally:
        bot.repository.dispose()
    return EXIT_OK


def _cmd_train(args: argparse.Namespace, settings: Settings) -> int:
    records = load_dataset(args.data)
    backend = args.backend or settings.classifier_backend
    clf = train_classifier(records, backend=backend)
    out = clf.save(args.out or settings.classifier_path)
    print(
        json.dumps(
            {"artifact": str(out), "backend": clf.backend, "labels": list(clf.labels), "examples": clf.num_examples},
            ensure_ascii=False,
            indent=2,
        )
    )
    return EXIT_OK


def _cmd_seed(args: argparse.Namespace, settings: Settings) -> int:
    records = load_dataset(args.data)
    repo = AnswerRepository(settings.database_url, fallback_answer=settings.fallback_answer)
    try:
        repo.create_schema()
        inserted = repo.add_records(records)
    finally:
        repo.dispose()
    summary = summarize_dataset(records)
    summary["inserted"] = inserted
    print(json.dumps(summary, ensure_ascii=False, indent=2))
    return EXIT_OK


def _cmd_inspect(args: argparse.Namespace, settings: Settings) -> int:
    bot, summary = load_bot_with_summary(settings)
    bot.repository.dispose()
    print(json.dumps(summary, ensure_ascii=False, indent=2))
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="faqbot", description="Answer FAQ questions by predicted category.")
    p.add_argument("--database-url", default=None, help="SQLAlchemy URL of the FAQ database (env: FAQBOT_DATABASE_URL)")
    p.add_argument("--model", dest="classifier_path", default=None, help="Classifier artifact path (env: FAQBOT_CLASSIFIER_PATH)")
    p.add_argument("--debug", action="store_true", help="Trace classification and lookup to stderr")
    sub = p.add_subparsers(dest="command", required=True)

    ask = sub.add_parser("ask", help="Answer a single question")
    ask.add_argument("question")
    ask.set_defaults(handler=_cmd_ask)

    chat = sub.add_parser("chat", help="Answer questions read from stdin, one per line")
    chat.set_defaults(handler=_cmd_chat)

    train = sub.add_parser("train", help="Fit and save a classifier artifact")
    train.add_argument("--data", required=True, help="FAQ dataset (.json or .csv)")
    train.add_argument("--out", default=None, help="Artifact path (default: configured classifier path)")
    train.add_argument("--backend", choices=BACKENDS, default=None)
    train.set_defaults(handler=_cmd_train)

    seed = sub.add_parser("seed", help="Create the FAQ table and insert records from a dataset")
    seed.add_argument("--data", required=True, help="FAQ dataset (.json or .csv)")
    seed.set_defaults(handler=_cmd_seed)

    inspect = sub.add_parser("inspect", help="Print label/storage coverage as JSON")
    inspect.set_defaults(handler=_cmd_inspect)
    return p


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    overrides = {k: getattr(args, k) for k in ("database_url", "classifier_path") if getattr(args, k)}
    if args.debug:
        overrides["debug"] = True
    settings = Settings().model_copy(update=overrides)

    try:
        return args.handler(args, settings)
    except ModelLoadError as e:
        print(f"error: classifier unavailable: {e.message}", file=sys.stderr)
        return EXIT_MODEL_ERROR
    except StorageError as e:
        print(f"error: FAQ storage unavailable: {e.message}", file=sys.stderr)
        return EXIT_STORAGE_ERROR
    except ClassificationError as e:
        print(f"error: could not classify question: {e.message}", file=sys.stderr)
        return EXIT_CLASSIFICATION_ERROR
    except (FileNotFoundError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_DATASET_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
