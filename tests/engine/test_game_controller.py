import random
import unittest
from unittest import mock

from shangludo.config import config
from shangludo.exceptions import (
    GameOverError,
    InvalidDiceValue,
    InvalidMoveSelection,
    InvalidSetup,
    PhaseError,
)
from shangludo.game import Game, GameSetup, Participant
from shangludo.paths import entry_square, path_of
from shangludo.scheduler import ManualScheduler
from shangludo.types import Color, GameMode, ParticipantKind, Phase


def fixed_dice(rolls):
    """Random source whose die rolls come from a fixed list."""
    rolls = list(rolls)
    rng = random.Random(0)
    rng.randint = lambda a, b: rolls.pop(0)
    return rng


def place(game, color, pawn_id, index):
    pw = game.board.pawn(color, pawn_id)
    pw.move_to(path_of(color)[index])
    pw.reached_home = index == config.HOME_INDEX
    return pw


def two_player_setup(green=ParticipantKind.AI, **kwargs):
    kwargs.setdefault("turn_timer_seconds", 0)
    kwargs.setdefault("ai_think_delay", 0.5)
    return GameSetup(
        participants=[
            Participant(Color.RED, ParticipantKind.HUMAN),
            Participant(Color.GREEN, green),
        ],
        **kwargs,
    )


class TestGameSetup(unittest.TestCase):
    def test_defaults(self):
        setup = GameSetup()
        self.assertEqual(setup.active_colors, list(Color))
        self.assertEqual(setup.participant(Color.RED).kind, ParticipantKind.HUMAN)
        self.assertEqual(setup.participant(Color.GREEN).name, "Green AI")
        setup.validate()

    def test_inactive_colors_leave_turn_order(self):
        setup = two_player_setup(turn_order=[Color.BLUE, Color.GREEN, Color.RED])
        self.assertEqual(setup.resolved_turn_order(), [Color.GREEN, Color.RED])
        game = Game(setup)
        self.assertEqual(sorted(game.board.colors), [Color.RED, Color.GREEN])

    def test_requires_a_human(self):
        setup = two_player_setup(green=ParticipantKind.AI)
        setup.participants[0] = Participant(Color.RED, ParticipantKind.AI)
        with self.assertRaises(InvalidSetup):
            setup.validate()
        setup.require_human = False
        setup.validate()

    def test_requires_two_players(self):
        setup = two_player_setup(green=ParticipantKind.NONE)
        with self.assertRaises(InvalidSetup):
            Game(setup)

    def test_turn_order_must_cover_every_player(self):
        setup = GameSetup(
            participants=[
                Participant(Color.RED, ParticipantKind.HUMAN),
                Participant(Color.GREEN, ParticipantKind.AI),
                Participant(Color.YELLOW, ParticipantKind.AI),
            ],
            turn_order=[Color.GREEN, Color.YELLOW],
        )
        with self.assertRaises(InvalidSetup):
            Game(setup)
        setup.turn_order = []
        self.assertEqual(
            setup.resolved_turn_order(), [Color.RED, Color.GREEN, Color.YELLOW]
        )
        setup.validate()

    def test_duplicate_color(self):
        setup = two_player_setup()
        setup.participants.append(Participant(Color.RED, ParticipantKind.AI))
        with self.assertRaises(ValueError):
            setup.validate()


class TestTurnFlow(unittest.TestCase):
    def setUp(self):
        self.game = Game(two_player_setup(green=ParticipantKind.HUMAN))
        self.game.start()

    def test_start_enters_rolling(self):
        self.assertIs(self.game.phase, Phase.ROLLING)
        self.assertEqual(self.game.current, Color.RED)
        self.assertIsNone(self.game.dice)
        with self.assertRaises(PhaseError):
            self.game.start()

    def test_no_move_passes_turn(self):
        outcome = self.game.roll(3)
        self.assertTrue(outcome.no_move)
        self.assertEqual(outcome.next_color, Color.GREEN)
        self.assertEqual(self.game.current, Color.GREEN)
        self.assertIs(self.game.phase, Phase.ROLLING)

    def test_six_without_move_rolls_again(self):
        for pawn_id in (1, 2, 3):
            place(self.game, Color.RED, pawn_id, config.HOME_INDEX)
        place(self.game, Color.RED, 0, 53)
        outcome = self.game.roll(6)
        self.assertTrue(outcome.no_move)
        self.assertEqual(self.game.current, Color.RED)
        self.assertIs(self.game.phase, Phase.ROLLING)

    def test_choice_waits_for_human(self):
        outcome = self.game.roll(6)
        self.assertTrue(outcome.waiting_for_human)
        self.assertIs(self.game.phase, Phase.MOVING)
        self.assertEqual(len(self.game.legal_moves()), 4)
        with self.assertRaises(PhaseError):
            self.game.roll(2)

        outcome = self.game.select_move(2)
        self.assertEqual(outcome.result.move.pawn_id, 2)
        self.assertEqual(self.game.board.pawn(Color.RED, 2).position, entry_square(Color.RED))
        # six grants another roll
        self.assertEqual(self.game.current, Color.RED)
        self.assertIs(self.game.phase, Phase.ROLLING)

    def test_single_move_is_applied_automatically(self):
        place(self.game, Color.RED, 0, 10)
        outcome = self.game.roll(4)
        self.assertTrue(outcome.auto)
        self.assertEqual(self.game.board.pawn(Color.RED, 0).position, path_of(Color.RED)[14])
        self.assertEqual(self.game.current, Color.GREEN)

    def test_invalid_selection_keeps_turn(self):
        place(self.game, Color.RED, 0, 10)
        place(self.game, Color.RED, 1, 20)
        self.game.roll(3)
        with self.assertRaises(InvalidMoveSelection) as ctx:
            self.game.select_move(3)
        self.assertEqual(ctx.exception.pawn_id, 3)
        with self.assertRaises(InvalidMoveSelection):
            self.game.select_move(0, color=Color.GREEN)
        self.assertIs(self.game.phase, Phase.MOVING)
        self.assertEqual(self.game.dice, 3)
        self.game.select_move(1)
        self.assertEqual(self.game.current, Color.GREEN)

    def test_invalid_dice(self):
        with self.assertRaises(InvalidDiceValue):
            self.game.roll(0)
        self.assertIs(self.game.phase, Phase.ROLLING)

    def test_capture_grants_extra_turn(self):
        place(self.game, Color.RED, 0, 2)
        green = self.game.board.pawn(Color.GREEN, 0)
        green.move_to(path_of(Color.RED)[5])
        outcome = self.game.roll(3)
        self.assertEqual(outcome.result.events.captured, [(Color.GREEN, 0)])
        self.assertEqual(self.game.current, Color.RED)

    def test_winning_move_ends_game(self):
        for pawn_id in (1, 2, 3):
            place(self.game, Color.RED, pawn_id, config.HOME_INDEX)
        place(self.game, Color.RED, 0, 53)
        outcome = self.game.roll(3)
        self.assertIsNotNone(outcome.result)
        self.assertEqual(outcome.result.winner, Color.RED)
        self.assertTrue(self.game.game_over)
        self.assertEqual(self.game.winner, Color.RED)
        self.assertEqual(self.game.summary.title, "Winner: Red")
        with self.assertRaises(GameOverError):
            self.game.roll(2)
        with self.assertRaises(GameOverError):
            self.game.select_move(0)

    def test_end_game_needs_a_started_game(self):
        game = Game(two_player_setup(green=ParticipantKind.HUMAN))
        with self.assertRaises(PhaseError):
            game.end_game()
        self.assertIs(game.phase, Phase.SETUP)

    def test_reset(self):
        self.game.roll(6)
        self.game.select_move(0)
        self.game.reset()
        self.assertIs(self.game.phase, Phase.SETUP)
        self.assertEqual(self.game.board.yard_count(Color.RED), 4)
        self.game.start()
        self.assertEqual(self.game.current, Color.RED)


class TestAiTurns(unittest.TestCase):
    def test_ai_rolls_after_think_delay(self):
        scheduler = ManualScheduler()
        game = Game(two_player_setup(), scheduler=scheduler, rng=fixed_dice([2]))
        game.start()
        game.roll(3)
        self.assertEqual(game.current, Color.GREEN)
        self.assertTrue(game.is_ai_turn())
        self.assertEqual(scheduler.advance(0.25), 0)
        self.assertEqual(scheduler.advance(0.25), 1)
        self.assertEqual(game.current, Color.RED)
        self.assertIs(game.phase, Phase.ROLLING)

    def test_ai_thinks_then_moves(self):
        scheduler = ManualScheduler()
        game = Game(two_player_setup(), scheduler=scheduler, rng=fixed_dice([6]))
        game.start()
        game.roll(1)
        scheduler.advance(0.5)
        self.assertIs(game.phase, Phase.AI_THINKING)
        self.assertEqual(game.dice, 6)
        scheduler.advance(0.5)
        self.assertEqual(game.board.yard_count(Color.GREEN), 3)
        self.assertEqual(game.board.count_at(Color.GREEN, entry_square(Color.GREEN)), 1)
        self.assertEqual(game.current, Color.GREEN)
        self.assertIs(game.phase, Phase.ROLLING)

    def test_auto_play_without_scheduler(self):
        game = Game(two_player_setup(), rng=fixed_dice([6, 4]))
        game.start()
        self.assertIsNone(game.auto_play())  # human turn
        game.roll(2)
        outcome = game.auto_play()
        self.assertIs(outcome.phase, Phase.AI_THINKING)
        outcome = game.auto_play()
        self.assertTrue(outcome.result.events.left_yard)
        outcome = game.auto_play()
        self.assertEqual(outcome.dice, 4)
        self.assertIs(game.phase, Phase.AI_THINKING)
        game.auto_play()
        self.assertEqual(game.current, Color.RED)

    def test_ai_forced_entry_through_controller(self):
        game = Game(two_player_setup(), rng=fixed_dice([6]))
        game.rules.safe_squares = frozenset()
        game.start()
        game.roll(3)
        place(game, Color.GREEN, 0, 0)
        place(game, Color.GREEN, 1, 0)
        # nothing else can move: only the stacked entry remains
        with mock.patch("shangludo.game.legal_moves", return_value=[]), mock.patch(
            "shangludo.strategy.base.legal_moves", return_value=[]
        ):
            outcome = game.auto_play()
            self.assertFalse(outcome.no_move)
            self.assertIs(game.phase, Phase.AI_THINKING)
            outcome = game.auto_play()
        self.assertEqual(outcome.result.move.origin, config.YARD)
        self.assertEqual(game.board.count_at(Color.GREEN, entry_square(Color.GREEN)), 3)
        self.assertEqual(game.board.yard_count(Color.GREEN), 1)
        self.assertEqual(game.current, Color.GREEN)

    def test_play_ai_requires_ai_thinking(self):
        game = Game(two_player_setup())
        game.start()
        with self.assertRaises(PhaseError):
            game.play_ai()


class TestTimers(unittest.TestCase):
    def test_turn_timer_passes_turn(self):
        scheduler = ManualScheduler()
        setup = two_player_setup(green=ParticipantKind.HUMAN, turn_timer_seconds=10)
        game = Game(setup, scheduler=scheduler)
        game.start()
        scheduler.advance(9)
        self.assertEqual(game.current, Color.RED)
        scheduler.advance(1)
        self.assertEqual(game.current, Color.GREEN)
        self.assertIs(game.phase, Phase.ROLLING)

    def test_roll_cancels_turn_timer(self):
        scheduler = ManualScheduler()
        setup = two_player_setup(green=ParticipantKind.HUMAN, turn_timer_seconds=10)
        game = Game(setup, scheduler=scheduler)
        game.start()
        stale = scheduler.pending()[0].key
        game.roll(6)
        self.assertIs(game.phase, Phase.MOVING)
        self.assertEqual(scheduler.pending(), [])
        scheduler.advance(60)
        self.assertIs(game.phase, Phase.MOVING)
        self.assertEqual(game.current, Color.RED)
        # a callback armed for an earlier phase is ignored
        game._on_turn_timeout(stale)
        self.assertIs(game.phase, Phase.MOVING)

    def test_quick_mode_has_no_turn_timer(self):
        scheduler = ManualScheduler()
        setup = two_player_setup(
            green=ParticipantKind.HUMAN, mode=GameMode.QUICK, turn_timer_seconds=10
        )
        game = Game(setup, scheduler=scheduler)
        game.start()
        self.assertEqual(scheduler.pending(), [])
        self.assertEqual(game.board.count_at(Color.RED, entry_square(Color.RED)), 4)

    def test_stale_ai_timer_after_reset(self):
        scheduler = ManualScheduler()
        game = Game(two_player_setup(), scheduler=scheduler, rng=fixed_dice([]))
        game.start()
        game.roll(3)
        handle = scheduler.pending()[0]
        game.reset()
        self.assertTrue(handle.cancelled)
        game._on_ai_timer(handle.key)
        self.assertIs(game.phase, Phase.SETUP)

    def test_game_timer_ends_timed_game(self):
        scheduler = ManualScheduler()
        setup = two_player_setup(
            green=ParticipantKind.HUMAN, mode=GameMode.TIMED, game_timer_seconds=300
        )
        game = Game(setup, scheduler=scheduler)
        game.start()
        scheduler.advance(100)
        self.assertAlmostEqual(game.game_time_remaining, 200.0)
        scheduler.advance(200)
        self.assertTrue(game.game_over)
        self.assertTrue(game.summary.draw)
        self.assertEqual(game.summary.title, "It's a Draw!")
        self.assertEqual(game.game_time_remaining, 0.0)

    def test_game_timer_picks_leader(self):
        scheduler = ManualScheduler()
        setup = two_player_setup(
            green=ParticipantKind.HUMAN, mode=GameMode.TIMED, game_timer_seconds=60
        )
        game = Game(setup, scheduler=scheduler)
        game.start()
        game.roll(6)
        game.select_move(0)
        scheduler.advance(60)
        self.assertTrue(game.game_over)
        self.assertEqual(game.summary.winner, Color.RED)


class TestTimedScoring(unittest.TestCase):
    def test_scores_follow_moves(self):
        setup = two_player_setup(green=ParticipantKind.HUMAN, mode=GameMode.TIMED)
        game = Game(setup)
        game.start()
        game.roll(6)
        game.select_move(0)
        self.assertEqual(game.scores[Color.RED], 1)
        game.roll(5)  # one pawn on the board, auto-moved
        self.assertEqual(game.scores[Color.RED], 6)
        self.assertEqual(game.scores[Color.GREEN], 0)

    def test_classic_mode_keeps_no_score(self):
        game = Game(two_player_setup(green=ParticipantKind.HUMAN))
        game.start()
        game.roll(6)
        game.select_move(0)
        self.assertEqual(game.scores, {Color.RED: 0, Color.GREEN: 0})


if __name__ == "__main__":
    unittest.main()
