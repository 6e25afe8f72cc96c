"""Console UI for wordbank application."""

from datetime import datetime

from core.config import LANGUAGES, NEW_WORD_LIMIT
from core.engine import SessionSummary
from core.errors import GenerationError, InvalidFeedback
from core.models import Mode, Signal
from core.profile import ProfileSession
from core.stats import format_duration, recent_logs
from cli.api_client import WordbankAPIClient

ANSWERS = {
    'k': Signal.KNOWN,
    'r': Signal.DEFERRED,
    'n': Signal.REFRESHED,
}


class ConsoleUI:
    """Console user interface for wordbank application."""

    def __init__(self, client: WordbankAPIClient, profile: ProfileSession):
        self.client = client
        self.profile = profile
        self.engine = profile.engine
        self.engine.subscribe('session_over', self.print_summary)

    def print_card_front(self, card):
        """Print the front of a card."""
        print('\n' + '=' * 40)
        print(f'[{card.level}]  {card.word}')
        print('=' * 40)
        print(self.engine.status_text())

    def print_card_back(self, card):
        """Print the back of a card."""
        print('-' * 40)
        print(f'  {card.translation}')
        if card.example:
            print(f'  Usage: "{card.example}"')
        print('-' * 40)

    def print_prompt(self, mode: Mode):
        known = 'next level' if mode == Mode.LEARN else 'level up'
        remind = 'level down' if mode == Mode.FINAL_REVIEW else 'review again'
        options = [f'[k] I know it ({known})', f'[r] Remind me later ({remind})']
        if mode == Mode.LEARN:
            options.append('[n] New word (save to bank)')
        print('  '.join(options))

    def print_summary(self, summary: SessionSummary):
        """Print the end-of-session summary."""
        print('\n' + '=' * 50)
        print('PRACTICE COMPLETE!')
        print('=' * 50)
        for title, words in (('New Words', summary.new_words),
                             ('Repeated Words', summary.repeated_words)):
            print(f'\n{title} ({len(words)})')
            if words:
                for word in words:
                    print(f'  {word.word:<20} {word.translation}')
            else:
                print('  No words in this category.')
        log = summary.log
        print(f'\nTime: {format_duration(log.duration)} | Level: {log.end_level}')
        print('=' * 50 + '\n')

    def print_stats(self):
        """Print overall statistics for the current language."""
        logs = self.profile.logs
        if not logs:
            print('\nNo stats yet. Complete a practice session to see your progress.\n')
            return
        totals = self.profile.stats()
        print('\n' + '=' * 50)
        print(f'STATISTICS FOR {self.profile.language.upper()}')
        print('=' * 50)
        print(f'Sessions: {totals["sessions"]}')
        print(f'Total time: {format_duration(totals["total_duration"])}')
        print(f'Total revised: {totals["total_words"]}')
        print(f'Total new words: {totals["total_new_words"]}')
        print(f'\n{"Date":<12} {"Duration":>10} {"Words (New)":>12} {"Level":>6}')
        for entry in recent_logs(logs):
            date = datetime.fromtimestamp(entry.timestamp / 1000).strftime('%Y-%m-%d')
            words = f'{entry.total_words} ({entry.new_words})'
            print(f'{date:<12} {format_duration(entry.duration):>10} {words:>12} {entry.end_level:>6}')
        print('=' * 50 + '\n')

    def print_word_bank(self):
        """Print the word bank grouped by mastery rank."""
        if not len(self.profile.bank):
            print('\nYour word bank is empty.\n')
            return
        for rank, records in self.profile.bank.by_rank().items():
            print(f'\nRank {rank}')
            for record in records:
                print(f'  {record.word:<20} {record.translation:<25} {record.level}')
        print()

    def choose_language(self):
        names = list(LANGUAGES)
        for i, name in enumerate(names, 1):
            marker = '*' if name == self.profile.language else ' '
            print(f' {marker} {i}. {name}')
        choice = input('Language number: ').strip()
        if choice.isdigit() and 1 <= int(choice) <= len(names):
            self.profile.switch_language(names[int(choice) - 1])
            print(f'Switched to {self.profile.language} (level {self.profile.level})')
            return True
        print('Unchanged.')
        return False

    def load_card(self):
        """Advance until a card is shown, letting the user retry failures."""
        while True:
            try:
                return self.engine.advance()
            except GenerationError as e:
                print(f'Failed to generate a new word: {e}')
                if input('Press Enter to retry, or "q" to quit: ').strip().lower() == 'q':
                    raise KeyboardInterrupt

    def run(self):
        """Run the main application loop."""
        # Check server connection
        try:
            health = self.client.health_check()
            print(f"Connected to wordbank server ({health['service']})")
        except Exception as e:
            print(f"Error: Cannot connect to server at {self.client.base_url}: {e}")
            print("Make sure the server is running: python run_server.py")
            return

        self.profile.load()
        print(f'Profile {self.profile.profile_id}: {len(self.profile.bank)} words in '
              f'{self.profile.language}, level {self.profile.level}')
        print(f'Up to {NEW_WORD_LIMIT} new words per session.')
        print('Commands: Enter flips the card, "s" stats, "b" word bank, '
              '"c" clear bank, "l" language, "q" quit\n')

        self.profile.start()
        card = self.load_card()
        while True:
            if card is None:
                if input('Start a new session? [Y/n] ').strip().lower() == 'n':
                    print('Goodbye!')
                    return
                self.profile.start()
                card = self.load_card()
                continue

            self.print_card_front(card)
            self.print_prompt(self.engine.mode)
            user_input = input('==> ').strip().lower()

            if user_input == 'q':
                print('Goodbye!')
                return
            elif user_input == '':
                if self.engine.flip():
                    self.print_card_back(card)
                    self.print_prompt(self.engine.mode)
                    user_input = input('==> ').strip().lower()
                    if user_input not in ANSWERS:
                        continue
                else:
                    continue
            elif user_input == 's':
                self.print_stats()
                continue
            elif user_input == 'b':
                self.print_word_bank()
                continue
            elif user_input == 'c':
                if input('Clear the whole word bank? [y/N] ').strip().lower() == 'y':
                    cleared = self.profile.clear_word_bank()
                    print(f'Cleared {cleared} word(s).')
                    card = self.load_card()
                continue
            elif user_input == 'l':
                if self.choose_language():
                    card = self.load_card()
                continue

            if user_input in ANSWERS:
                try:
                    card = self.engine.respond(ANSWERS[user_input])
                except InvalidFeedback as e:
                    print(e)
                except GenerationError as e:
                    print(f'Failed to generate a new word: {e}')
                    card = self.load_card()
