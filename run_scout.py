#!/usr/bin/env python
"""
Run script for Item Scout.
Use: python run_scout.py --description "Canon AE-1 film camera" --category "Cameras"
Or:  python run_scout.py --image photo.jpg
Keys: python run_scout.py --set-credential chatGptApiKey=sk-... --set-credential ebayAppId=...
"""
import argparse
import asyncio
import json
import logging
import mimetypes
import sys
from pathlib import Path
from typing import Optional

from scout.ai import (
    LLMClient,
    StaticMarketResearcher,
    VisionIdentifier,
    WebMarketResearcher,
    chat_drafter_factory,
)
from scout.client import build_marketplace
from scout.config import get_config
from scout.errors import ScoutError
from scout.models import CredentialSet, ItemIdentification
from scout.pipeline import FallbackDraftSynthesizer, ListingPipeline
from scout.storage import CredentialStore, DraftHistoryStore, JsonFileStore


logger = logging.getLogger("scout")


def merge_credentials(stored: CredentialSet, env: CredentialSet) -> CredentialSet:
    """Stored values win; empty stored fields fall back to the environment."""
    merged = {
        name: getattr(stored, name) or getattr(env, name)
        for name in CredentialSet.model_fields
    }
    return CredentialSet(**merged)


def apply_credential_settings(credentials: CredentialSet, settings: list[str]) -> CredentialSet:
    """
    Apply NAME=VALUE settings; NAME is a field name or its stored alias.

    Raises:
        ValueError: If a setting is malformed or names no credential
    """
    names = {}
    for name, field in CredentialSet.model_fields.items():
        names[name] = name
        names[field.alias or name] = name

    updates = {}
    for setting in settings:
        key, sep, value = setting.partition("=")
        if not sep or key.strip() not in names:
            raise ValueError(f"Expected NAME=VALUE with NAME one of {', '.join(sorted(names))}, got {setting!r}")
        updates[names[key.strip()]] = value.strip()
    return credentials.model_copy(update=updates)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a marketplace listing draft for an item.")
    parser.add_argument("--description", help="Item description (skips image identification)")
    parser.add_argument("--category", help="Item category (with --description)")
    parser.add_argument("--image", type=Path, help="Photo of the item to identify")
    parser.add_argument("--research-file", type=Path, help="Use saved market research text instead of web search")
    parser.add_argument("--history", action="store_true", help="Print saved drafts and exit")
    parser.add_argument("--clear-history", action="store_true", help="Delete saved drafts and exit")
    parser.add_argument(
        "--set-credential",
        action="append",
        metavar="NAME=VALUE",
        help="Store a credential (e.g. chatGptApiKey=sk-..., ebayAppId=...) and exit; repeatable",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


async def identify(args: argparse.Namespace, llm_client: LLMClient) -> tuple[ItemIdentification, Optional[str]]:
    if args.description:
        return ItemIdentification(description=args.description, category=args.category or ""), None

    mime_type = mimetypes.guess_type(args.image.name)[0] or "image/jpeg"
    identifier = VisionIdentifier(llm_client, model=get_config().openai.vision_model)
    identification = await identifier.identify(args.image.read_bytes(), mime_type)
    return identification, args.image.resolve().as_uri()


async def run(args: argparse.Namespace) -> int:
    config = get_config()
    store = JsonFileStore(config.storage.store_path)
    history = DraftHistoryStore(store)
    credential_store = CredentialStore(store)

    if args.set_credential:
        try:
            credentials = apply_credential_settings(credential_store.load(), args.set_credential)
        except ValueError as e:
            print(str(e), file=sys.stderr)
            return 2
        credential_store.save(credentials)
        print("Credentials saved.")
        return 0

    if args.clear_history:
        history.clear()
        print("History cleared.")
        return 0

    if args.history:
        drafts = [d.to_storage() for d in history.load_all()]
        print(json.dumps(drafts, indent=2, ensure_ascii=False))
        return 0

    if not args.description and not args.image:
        print("Provide --description/--category or --image.", file=sys.stderr)
        return 2

    credentials = merge_credentials(credential_store.load(), config.env_credentials())
    llm_client = LLMClient(api_key=credentials.chat_gpt_api_key)

    if args.research_file:
        researcher = StaticMarketResearcher(args.research_file.read_text(encoding="utf-8"))
    elif not credentials.has_drafting_key:
        # Research and drafting share the OpenAI key
        logger.info("No OpenAI API key, skipping web market research")
        researcher = StaticMarketResearcher("")
    else:
        researcher = WebMarketResearcher(llm_client, model=config.openai.research_model)

    pipeline = ListingPipeline(
        researcher=researcher,
        marketplace=build_marketplace(credentials, config=config.ebay),
        history=history,
        drafter_factory=chat_drafter_factory,
        credentials=credentials,
        synthesizer=FallbackDraftSynthesizer(
            title_max_length=config.pipeline.title_max_length,
            keyword_limit=config.pipeline.keyword_limit,
        ),
        keyword_limit=config.pipeline.keyword_limit,
        on_state_change=lambda state: logger.info(f"Pipeline state: {state.value}"),
    )

    try:
        identification, image_url = await identify(args, llm_client)
    except ScoutError as e:
        print(f"Failed to identify item: {e}", file=sys.stderr)
        return 1

    draft = await pipeline.submit(identification, image_url=image_url)
    if draft is None:
        message = str(pipeline.last_error) if pipeline.last_error else "Identification is incomplete."
        print(f"Failed to generate listing: {message}", file=sys.stderr)
        return 1

    print(json.dumps(draft.to_storage(), indent=2, ensure_ascii=False))
    return 0


def main():
    """Run the listing pipeline once from the command line."""
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
