#!/usr/bin/env python3
"""
Game Tracker - terminal client for the game/achievement tracker service.
Sign in, keep a list of your games, log achievements per game and ask the
gaming assistant for tips.
"""

import argparse
import getpass
import json
import logging
import os
import sys
from typing import Dict, List, Optional

from colorama import init, Fore, Style

from api_client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, TrackerAPIClient
from app.repositories import TokenRepository
from app.services import SessionStore
from app.views import (
    AchievementsView, ChatView, GamesView, InvalidTransition, extract_entity_id,
)

# Initialize colorama for cross-platform colored terminal output
init(autoreset=True)

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

def setup_logging(level: str = 'WARNING') -> logging.Logger:
    """Configure the root tracker logger.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to WARNING so normal use is quiet.

    Returns:
        Configured logger instance.
    """
    numeric = getattr(logging, str(level).upper(), logging.WARNING)
    logger = logging.getLogger('tracker')
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('[%(levelname)s] %(name)s: %(message)s'))
        logger.addHandler(handler)
    logger.setLevel(numeric)
    return logger


logger = setup_logging()

DEFAULT_SESSION_FILE = '.tracker_session.json'

DEFAULT_CONFIG = {
    'api_url': DEFAULT_BASE_URL,
    'api_timeout_seconds': DEFAULT_TIMEOUT,
    'session_file': DEFAULT_SESSION_FILE,
    'log_level': 'WARNING',
    'verify_session_on_start': True,
}

# config key -> environment variable
_ENV_OVERRIDES = {
    'api_url': 'TRACKER_API_URL',
    'api_timeout_seconds': 'TRACKER_API_TIMEOUT',
    'session_file': 'TRACKER_SESSION_FILE',
    'log_level': 'TRACKER_LOG_LEVEL',
    'verify_session_on_start': 'TRACKER_VERIFY_SESSION',
}

_TRUE_WORDS = ('1', 'true', 'yes', 'on')
_FALSE_WORDS = ('0', 'false', 'no', 'off')


def _as_bool(value, default: bool) -> bool:
    """Read a flag given as JSON bool/number or as a string such as ``"false"``."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    word = str(value).strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    logger.warning("Invalid boolean %r; using %s.", value, default)
    return default


def load_config(config_path: str = 'config.json') -> Dict:
    """Load configuration from JSON file with environment variable support.

    A missing file is not an error: the defaults are used.  Environment
    variables take precedence over config file values:
    - TRACKER_API_URL overrides api_url
    - TRACKER_API_TIMEOUT overrides api_timeout_seconds
    - TRACKER_SESSION_FILE overrides session_file
    - TRACKER_LOG_LEVEL overrides log_level
    - TRACKER_VERIFY_SESSION overrides verify_session_on_start
    """
    config = dict(DEFAULT_CONFIG)
    if os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                config.update(json.load(f))
        except json.JSONDecodeError as e:
            print(f"{Fore.RED}Error: Invalid JSON in config file: {e}")
            sys.exit(1)
    else:
        logger.info("Config file '%s' not found; using defaults.", config_path)

    for key, env_var in _ENV_OVERRIDES.items():
        if os.getenv(env_var):
            config[key] = os.getenv(env_var)

    try:
        config['api_timeout_seconds'] = float(config['api_timeout_seconds'])
        if config['api_timeout_seconds'] <= 0:
            raise ValueError(config['api_timeout_seconds'])
    except (TypeError, ValueError):
        logger.warning("Invalid api_timeout_seconds %r; using %ss.",
                       config['api_timeout_seconds'], DEFAULT_TIMEOUT)
        config['api_timeout_seconds'] = DEFAULT_TIMEOUT

    config['verify_session_on_start'] = _as_bool(
        config['verify_session_on_start'], DEFAULT_CONFIG['verify_session_on_start'])

    return config


def confirm_prompt(message: str) -> bool:
    """Ask a yes/no question; anything but ``y``/``yes`` means no."""
    answer = input(f"{Fore.YELLOW}{message} (y/N): {Fore.WHITE}").strip().lower()
    return answer in ('y', 'yes')


class TrackerApp:
    """Wires config, session and views together and drives the terminal UI."""

    def __init__(self, config_path: str = 'config.json', http_session=None):
        self._log = logging.getLogger('tracker.app')
        self.config = load_config(config_path)

        # Re-apply log level from config (allows "log_level": "DEBUG" in config.json)
        setup_logging(self.config.get('log_level', 'WARNING'))

        self.client = TrackerAPIClient(
            self.config['api_url'],
            timeout=self.config['api_timeout_seconds'],
            session=http_session,
        )
        self.token_repository = TokenRepository(self.config['session_file'])
        self.session = SessionStore(self.token_repository, self.client)

        self.games_view = GamesView(self.session)
        self.achievements_view = AchievementsView(self.session)
        self.chat_view = ChatView(self.session)

    def start(self) -> bool:
        """Resume a stored session, if any.  Returns ``True`` when signed in."""
        restored = self.session.restore(verify=self.config['verify_session_on_start'])
        if restored:
            self._log.info("Resumed stored session")
        return restored

    # ------------------------------------------------------------------
    # Output helpers
    # ------------------------------------------------------------------

    def display_user(self):
        user = self.session.user
        if not user:
            print(f"{Fore.YELLOW}Not signed in.")
            return
        print(f"{Fore.GREEN}Signed in as {Style.BRIGHT}{user.get('username', '?')}"
              f"{Style.NORMAL} <{user.get('email', '?')}>")

    @staticmethod
    def display_games(games: List[Dict]):
        if not games:
            print(f"{Fore.YELLOW}No games yet.")
            return
        for i, game in enumerate(games, 1):
            extras = ' / '.join(v for v in (game.get('genre'), game.get('platform')) if v)
            line = f"{Fore.YELLOW}{i:>3}. {Fore.WHITE}{Style.BRIGHT}{game.get('name', 'Unknown')}"
            if extras:
                line += f"{Style.NORMAL}{Fore.CYAN}  ({extras})"
            print(line)

    @staticmethod
    def display_achievements(achievements: List[Dict]):
        if not achievements:
            print(f"{Fore.YELLOW}No achievements found.")
            return
        for i, ach in enumerate(achievements, 1):
            date = (ach.get('dateAchieved') or '').split('T')[0]
            print(f"{Fore.YELLOW}{i:>3}. {Fore.WHITE}{Style.BRIGHT}{ach.get('title', 'Untitled')}"
                  f"{Style.NORMAL}{Fore.CYAN}  {date}")
            if ach.get('description'):
                print(f"       {Fore.WHITE}{ach['description']}")

    @staticmethod
    def display_error(view):
        if view.error:
            print(f"{Fore.RED}{view.error}")

    # ------------------------------------------------------------------
    # Authentication prompts
    # ------------------------------------------------------------------

    def login_prompt(self, email: Optional[str] = None) -> bool:
        email = email or input(f"{Fore.GREEN}Email: {Fore.WHITE}").strip()
        password = getpass.getpass('Password: ')
        ok, error = self.session.login(email, password)
        if ok:
            self.display_user()
        else:
            print(f"{Fore.RED}{error}")
        return ok

    def register_prompt(self, username: Optional[str] = None,
                        email: Optional[str] = None) -> bool:
        username = username or input(f"{Fore.GREEN}Username: {Fore.WHITE}").strip()
        email = email or input(f"{Fore.GREEN}Email: {Fore.WHITE}").strip()
        password = getpass.getpass('Password: ')
        ok, error = self.session.register(username, email, password)
        if ok:
            print(f"{Fore.GREEN}Account created.")
            self.display_user()
        else:
            print(f"{Fore.RED}{error}")
        return ok

    # ------------------------------------------------------------------
    # Interactive screens
    # ------------------------------------------------------------------

    def _pick(self, items: List[Dict], prompt: str) -> Optional[Dict]:
        raw = input(f"{Fore.GREEN}{prompt} #: {Fore.WHITE}").strip()
        try:
            index = int(raw)
        except ValueError:
            print(f"{Fore.RED}Invalid number.")
            return None
        if not 1 <= index <= len(items):
            print(f"{Fore.RED}No entry #{index}.")
            return None
        return items[index - 1]

    @staticmethod
    def _edit_field(label: str, current: str) -> str:
        suffix = f" [{current}]" if current else ''
        value = input(f"{Fore.GREEN}{label}{suffix}: {Fore.WHITE}").strip()
        return value or current

    def _fill_game_form(self, form):
        form.name = self._edit_field('Name', form.name)
        form.genre = self._edit_field('Genre', form.genre)
        form.platform = self._edit_field('Platform', form.platform)

    def _fill_achievement_form(self, form):
        form.title = self._edit_field('Title', form.title)
        form.description = self._edit_field('Description', form.description)
        form.date_achieved = self._edit_field('Date achieved (YYYY-MM-DD)', form.date_achieved)

    def _submit_dialog(self, view) -> bool:
        try:
            ok = view.submit()
        except InvalidTransition:
            print(f"{Fore.RED}Nothing loaded yet. Reload the list first.")
            view.close_dialog()
            return False
        for field, message in view.form_errors.items():
            print(f"{Fore.RED}{field}: {message}")
        if ok:
            print(f"{Fore.GREEN}Saved.")
        else:
            self.display_error(view)
            view.close_dialog()
        return ok

    def games_menu(self):
        view = self.games_view
        view.load()
        while self.session.is_authenticated:
            print(f"\n{Fore.CYAN}{Style.BRIGHT}My Games")
            print(f"{Fore.WHITE}{'='*40}")
            self.display_error(view)
            self.display_games(view.items)
            print(f"{Fore.WHITE}{'='*40}")
            print(f"{Fore.YELLOW}a. {Fore.WHITE}Add game   "
                  f"{Fore.YELLOW}e. {Fore.WHITE}Edit   "
                  f"{Fore.YELLOW}d. {Fore.WHITE}Delete   "
                  f"{Fore.YELLOW}r. {Fore.WHITE}Reload   "
                  f"{Fore.YELLOW}b. {Fore.WHITE}Back")
            choice = input(f"\n{Fore.GREEN}Enter your choice: {Fore.WHITE}").strip().lower()

            if choice == 'b':
                break
            elif choice == 'r':
                view.load()
            elif choice == 'a':
                self._fill_game_form(view.open_create())
                self._submit_dialog(view)
            elif choice == 'e':
                game = self._pick(view.items, 'Game')
                if game:
                    self._fill_game_form(view.open_edit(game))
                    self._submit_dialog(view)
            elif choice == 'd':
                game = self._pick(view.items, 'Game')
                if game and view.delete(
                        extract_entity_id(game),
                        lambda: confirm_prompt(
                            f"Delete '{game.get('name')}'? This action cannot be undone.")):
                    print(f"{Fore.GREEN}Deleted.")
                else:
                    self.display_error(view)
            else:
                print(f"{Fore.RED}Invalid choice.")

    def achievements_menu(self):
        view = self.achievements_view
        if not view.load_games():
            self.display_error(view)
            return
        if not view.games:
            print(f"{Fore.YELLOW}Add a game first.")
            return
        self.display_games(view.games)
        game = self._pick(view.games, 'Game')
        if not game:
            return
        view.select_game(extract_entity_id(game))

        while self.session.is_authenticated:
            print(f"\n{Fore.CYAN}{Style.BRIGHT}Achievements - {game.get('name', '?')}")
            if view.search_term:
                print(f"{Fore.MAGENTA}Search: {view.search_term}")
            print(f"{Fore.WHITE}{'='*40}")
            self.display_error(view)
            self.display_achievements(view.items)
            print(f"{Fore.WHITE}{'='*40}")
            print(f"{Fore.YELLOW}a. {Fore.WHITE}Add   "
                  f"{Fore.YELLOW}e. {Fore.WHITE}Edit   "
                  f"{Fore.YELLOW}d. {Fore.WHITE}Delete   "
                  f"{Fore.YELLOW}s. {Fore.WHITE}Search   "
                  f"{Fore.YELLOW}c. {Fore.WHITE}Clear search   "
                  f"{Fore.YELLOW}b. {Fore.WHITE}Back")
            choice = input(f"\n{Fore.GREEN}Enter your choice: {Fore.WHITE}").strip().lower()

            if choice == 'b':
                break
            elif choice == 's':
                keyword = input(f"{Fore.GREEN}Keyword: {Fore.WHITE}")
                if not view.search(keyword):
                    self.display_error(view)
            elif choice == 'c':
                view.clear_search()
            elif choice == 'a':
                self._fill_achievement_form(view.open_create())
                self._submit_dialog(view)
            elif choice == 'e':
                ach = self._pick(view.items, 'Achievement')
                if ach:
                    self._fill_achievement_form(view.open_edit(ach))
                    self._submit_dialog(view)
            elif choice == 'd':
                ach = self._pick(view.items, 'Achievement')
                if ach and view.delete(
                        extract_entity_id(ach),
                        lambda: confirm_prompt(f"Delete '{ach.get('title')}'?")):
                    print(f"{Fore.GREEN}Deleted.")
                else:
                    self.display_error(view)
            else:
                print(f"{Fore.RED}Invalid choice.")

    def chat_menu(self):
        view = self.chat_view
        print(f"\n{Fore.CYAN}{Style.BRIGHT}Gaming Assistant {Style.NORMAL}(empty line to go back)")
        print(f"{Fore.MAGENTA}Bot: {Fore.WHITE}{view.messages[0]['text']}")
        while self.session.is_authenticated:
            question = input(f"{Fore.GREEN}You: {Fore.WHITE}")
            if not question.strip():
                break
            reply = view.send(question)
            if reply:
                colour = Fore.RED if reply['is_error'] else Fore.WHITE
                print(f"{Fore.MAGENTA}Bot: {colour}{reply['text']}")

    def interactive_mode(self):
        """Run in interactive mode"""
        self.start()
        while True:
            print(f"\n{Fore.CYAN}{Style.BRIGHT}Game Tracker")
            print(f"{Fore.WHITE}{'='*40}")
            if self.session.is_authenticated:
                self.display_user()
                print(f"{Fore.YELLOW}1. {Fore.WHITE}My games")
                print(f"{Fore.YELLOW}2. {Fore.WHITE}Achievements")
                print(f"{Fore.YELLOW}3. {Fore.WHITE}Gaming assistant")
                print(f"{Fore.YELLOW}4. {Fore.WHITE}Log out")
            else:
                print(f"{Fore.YELLOW}1. {Fore.WHITE}Log in")
                print(f"{Fore.YELLOW}2. {Fore.WHITE}Register")
            print(f"{Fore.YELLOW}q. {Fore.WHITE}Quit")
            print(f"{Fore.WHITE}{'='*40}")

            choice = input(f"\n{Fore.GREEN}Enter your choice: {Fore.WHITE}").strip().lower()

            if choice == 'q':
                print(f"\n{Fore.CYAN}Thanks for using Game Tracker! Happy gaming! 🎮")
                break
            if not self.session.is_authenticated:
                if choice == '1':
                    self.login_prompt()
                elif choice == '2':
                    self.register_prompt()
                else:
                    print(f"{Fore.RED}Invalid choice.")
                continue
            if choice == '1':
                self.games_menu()
            elif choice == '2':
                self.achievements_menu()
            elif choice == '3':
                self.chat_menu()
            elif choice == '4':
                self.session.logout()
                print(f"{Fore.GREEN}Logged out.")
            else:
                print(f"{Fore.RED}Invalid choice.")
                continue
            if not self.session.is_authenticated and choice != '4':
                print(f"{Fore.YELLOW}Your session has expired. Please log in again.")


def _require_session(app: TrackerApp):
    if not app.start():
        print(f"{Fore.RED}Error: not signed in. Use --login EMAIL first.")
        sys.exit(1)


def main(argv=None):
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description='Game Tracker - games, achievements and a gaming assistant',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python3 tracker.py                          # Run in interactive mode
  python3 tracker.py --login me@example.com   # Sign in and store the session
  python3 tracker.py --list-games             # List your games
  python3 tracker.py --search speed --game ID # Search a game's achievements
  python3 tracker.py --ask "Best early build?"
        """
    )

    parser.add_argument(
        '--config', '-c',
        default='config.json',
        help='Path to config file (default: config.json)'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Override the configured log level'
    )
    parser.add_argument(
        '--login',
        metavar='EMAIL',
        help='Sign in (password is prompted) and exit'
    )
    parser.add_argument(
        '--register',
        nargs=2,
        metavar=('USERNAME', 'EMAIL'),
        help='Create an account (password is prompted) and exit'
    )
    parser.add_argument(
        '--logout',
        action='store_true',
        help='Forget the stored session and exit'
    )
    parser.add_argument(
        '--whoami',
        action='store_true',
        help='Show the signed-in user and exit'
    )
    parser.add_argument(
        '--list-games', '-l',
        action='store_true',
        help='List your games and exit'
    )
    parser.add_argument(
        '--achievements',
        metavar='GAME_ID',
        help='List the achievements of a game and exit'
    )
    parser.add_argument(
        '--search',
        metavar='KEYWORD',
        help='Search achievements of --game by keyword'
    )
    parser.add_argument(
        '--game',
        metavar='GAME_ID',
        help='Game to search in (used with --search)'
    )
    parser.add_argument(
        '--ask',
        metavar='QUESTION',
        help='Ask the gaming assistant a question and exit'
    )

    args = parser.parse_args(argv)

    if args.search and not args.game:
        parser.error('--search requires --game')

    print(f"{Fore.CYAN}{Style.BRIGHT}Game Tracker{Style.RESET_ALL}\n")

    try:
        app = TrackerApp(config_path=args.config)
        if args.log_level:
            setup_logging(args.log_level)

        if args.logout:
            app.session.logout()
            print(f"{Fore.GREEN}Logged out.")
            return

        if args.login:
            if not app.login_prompt(args.login):
                sys.exit(1)
            return

        if args.register:
            if not app.register_prompt(*args.register):
                sys.exit(1)
            return

        if args.whoami:
            _require_session(app)
            app.display_user()
            return

        if args.list_games:
            _require_session(app)
            if not app.games_view.load():
                app.display_error(app.games_view)
                sys.exit(1)
            app.display_games(app.games_view.items)
            return

        if args.achievements or args.search:
            _require_session(app)
            view = app.achievements_view
            ok = view.select_game(args.achievements or args.game)
            if ok and args.search:
                ok = view.search(args.search)
            if not ok:
                app.display_error(view)
                sys.exit(1)
            app.display_achievements(view.items)
            return

        if args.ask:
            _require_session(app)
            reply = app.chat_view.send(args.ask)
            if reply is None or reply['is_error']:
                print(f"{Fore.RED}{reply['text'] if reply else 'Nothing to ask.'}")
                sys.exit(1)
            print(f"{Fore.MAGENTA}Bot: {Fore.WHITE}{reply['text']}")
            return

        app.interactive_mode()
    except KeyboardInterrupt:
        print(f"\n\n{Fore.YELLOW}Interrupted by user. Goodbye!")
    except Exception as e:
        logger.debug("Unexpected error", exc_info=True)
        print(f"\n{Fore.RED}An unexpected error occurred: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
