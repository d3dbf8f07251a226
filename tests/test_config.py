import unittest

from ludo_race.config import (
    Config,
    DifficultySettings,
    HeuristicWeights,
    PacingConfig,
)
from ludo_race.constants import Difficulty


class TestConfig(unittest.TestCase):
    def test_board_defaults(self):
        cfg = Config()
        self.assertEqual(cfg.TRACK_LENGTH, 52)
        self.assertEqual(cfg.HOME_STRETCH_LENGTH, 6)
        self.assertEqual(cfg.UNLOCK_VALUE, 6)

    def test_custom_values(self):
        cfg = Config(MAX_CONSECUTIVE_SIXES=2, CAPTURE_ON_ENTRY_CELLS=True)
        self.assertEqual(cfg.MAX_CONSECUTIVE_SIXES, 2)
        self.assertTrue(cfg.CAPTURE_ON_ENTRY_CELLS)

    def test_player_count_validated(self):
        with self.assertRaises(ValueError):
            Config(NUM_PLAYERS=5)
        with self.assertRaises(ValueError):
            Config(NUM_PLAYERS=1)


class TestHeuristicWeights(unittest.TestCase):
    def test_custom_values(self):
        w = HeuristicWeights(capture=10.0, finish=20.0)
        self.assertEqual(w.capture, 10.0)
        self.assertEqual(w.finish, 20.0)
        self.assertEqual(w.danger_penalty, 30)


class TestDifficultySettings(unittest.TestCase):
    def test_lookup_by_difficulty(self):
        settings = DifficultySettings(easy_randomness=0.5, hard_think_ms=1200)
        self.assertEqual(settings.randomness(Difficulty.EASY), 0.5)
        self.assertEqual(settings.think_time_ms(Difficulty.HARD), 1200)


class TestPacingConfig(unittest.TestCase):
    def test_presentation_delays(self):
        cfg = PacingConfig(scale=1.0)
        self.assertEqual(cfg.dice_roll_ms, 800)
        self.assertEqual(cfg.token_move_ms, 300)
        self.assertEqual(cfg.message_ms, 2000)


if __name__ == "__main__":
    unittest.main()
