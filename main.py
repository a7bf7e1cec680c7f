import time
import logging
import json
import argparse
from datetime import date, datetime, timezone

from core.config_loader import load_config
from core.deck import DailyDeckOrchestrator, ExposureService
from database.database import configure as configure_database, db_session_scope
from database.init_db import init_db
from database.repositories import ProfileRepository
from database.uow import deck_uow

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _parse_date(value):
    if value is None:
        return datetime.now(timezone.utc).date()
    return date.fromisoformat(value)


def cmd_init_db(args, config):
    init_db()


def cmd_deck(args, config):
    on_date = _parse_date(args.date)
    with deck_uow() as session:
        orchestrator = DailyDeckOrchestrator.build(session, config.matchmaking)
        try:
            result = orchestrator.get_or_create_deck(args.user_id, on_date)
        finally:
            orchestrator.close()
    print(json.dumps(result.to_dict(), indent=2))


def cmd_generate_all(args, config):
    """Pre-generate today's deck for every matchable user, one transaction per user."""
    on_date = _parse_date(args.date)
    with db_session_scope() as session:
        user_ids = ProfileRepository(session).list_user_ids()

    logger.info(f"Generating decks for {len(user_ids)} users on {on_date}")
    start = time.time()
    generated = cached = failed = 0

    for user_id in user_ids:
        try:
            with deck_uow() as session:
                orchestrator = DailyDeckOrchestrator.build(session, config.matchmaking)
                try:
                    result = orchestrator.get_or_create_deck(user_id, on_date)
                finally:
                    orchestrator.close()
            if result.was_freshly_generated:
                generated += 1
            else:
                cached += 1
        except Exception as e:
            failed += 1
            logger.error(f"Deck generation failed for user {user_id}: {e}", exc_info=True)

    elapsed = time.time() - start
    logger.info(f"Decks done in {elapsed:.2f}s: {generated} generated, {cached} cached, {failed} failed")


def cmd_seen(args, config):
    on_date = _parse_date(args.date)
    with db_session_scope() as session:
        seen = ExposureService(session).has_seen(args.viewer_id, args.candidate_id, on_date, args.surface)
    print(json.dumps({
        "viewer_id": args.viewer_id,
        "candidate_id": args.candidate_id,
        "date": on_date.isoformat(),
        "seen": seen,
    }))


def build_parser():
    parser = argparse.ArgumentParser(description="Daily matchmaking deck driver")
    parser.add_argument('--config', type=str, default='config.yaml', help='Path to config.yaml')
    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('init-db', help='Create tables (waits for the database to come up)')
    p.set_defaults(func=cmd_init_db)

    p = sub.add_parser('deck', help="Get or create a user's deck and print it as JSON")
    p.add_argument('--user-id', type=int, required=True)
    p.add_argument('--date', type=str, default=None, help='UTC date YYYY-MM-DD (default: today)')
    p.set_defaults(func=cmd_deck)

    p = sub.add_parser('generate-all', help="Generate the day's deck for every matchable user")
    p.add_argument('--date', type=str, default=None, help='UTC date YYYY-MM-DD (default: today)')
    p.set_defaults(func=cmd_generate_all)

    p = sub.add_parser('seen', help='Whether a candidate was shown to a viewer on a date')
    p.add_argument('--viewer-id', type=int, required=True)
    p.add_argument('--candidate-id', type=int, required=True)
    p.add_argument('--date', type=str, default=None, help='UTC date YYYY-MM-DD (default: today)')
    p.add_argument('--surface', type=str, default=None, help='DECK, MOMENTS or PENDING (default: any)')
    p.set_defaults(func=cmd_seen)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    configure_database(config.database.url)
    logger.info(f"Running '{args.command}'")
    args.func(args, config)


if __name__ == "__main__":
    main()
