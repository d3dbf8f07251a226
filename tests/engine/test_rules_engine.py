import unittest
from dataclasses import replace

from ludo_race.board import Board
from ludo_race.config import Config
from ludo_race.game import GameState, PlayerSpec
from ludo_race.serialization import restore, snapshot
from ludo_race.rules import Rules
from ludo_race.token import TokenState
from ludo_race.types import (
    AdvanceMove,
    CaptureMove,
    FinishMove,
    MoveKind,
    UnlockMove,
)


class TestRulesEngine(unittest.TestCase):
    def setUp(self):
        self.state = GameState.new_game([PlayerSpec(name=n) for n in "ABCD"])
        self.rules = Rules()
        self.red, self.green, self.yellow, self.blue = self.state.players

    def force_position(self, player, slot, track_index, total_steps=None):
        token = player.tokens[slot]
        token.state = TokenState.ACTIVE
        token.track_index = track_index
        token.home_path_index = -1
        token.total_steps = track_index if total_steps is None else total_steps
        return token

    def force_home_path(self, player, slot, home_path_index):
        token = player.tokens[slot]
        token.state = TokenState.ACTIVE
        token.track_index = -1
        token.home_path_index = home_path_index
        token.total_steps = 52 + home_path_index
        return token

    def moves_for(self, player, dice):
        return self.rules.get_valid_moves(player, dice, self.state.players)

    def test_six_unlocks_every_home_token(self):
        moves = self.moves_for(self.red, 6)
        self.assertEqual(len(moves), 4)
        self.assertTrue(all(isinstance(m, UnlockMove) for m in moves))
        self.assertEqual([m.token_id for m in moves], ["red_0", "red_1", "red_2", "red_3"])
        self.assertEqual(moves[0].to_track_index, 0)

    def test_no_moves_without_six(self):
        for dice in range(1, 6):
            self.assertEqual(self.moves_for(self.red, dice), [])

    def test_can_move_reasons(self):
        token = self.red.tokens[0]
        self.assertEqual(self.rules.can_move(token, 4), (False, "Need 6 to unlock"))
        self.assertEqual(self.rules.can_move(token, 6), (True, None))
        self.force_home_path(self.red, 1, 4)
        self.assertEqual(
            self.rules.can_move(self.red.tokens[1], 3), (False, "Overshoots home")
        )
        self.red.tokens[2].state = TokenState.FINISHED
        self.assertEqual(
            self.rules.can_move(self.red.tokens[2], 1), (False, "Token already finished")
        )

    def test_capture_detected(self):
        self.force_position(self.red, 0, 5)
        victim = self.force_position(self.green, 0, 8, total_steps=47)
        moves = self.moves_for(self.red, 3)
        self.assertEqual(len(moves), 1)
        self.assertIsInstance(moves[0], CaptureMove)
        self.assertIs(moves[0].captured, victim)
        self.assertEqual(moves[0].kind, MoveKind.CAPTURE)

    def test_no_capture_on_safe_cell(self):
        self.force_position(self.red, 0, 0)
        self.force_position(self.green, 0, 2, total_steps=41)
        moves = self.moves_for(self.red, 2)
        self.assertIsInstance(moves[0], AdvanceMove)

    def test_no_capture_on_entry_cell(self):
        self.force_position(self.red, 0, 10)
        self.force_position(self.green, 0, 13, total_steps=0)
        moves = self.moves_for(self.red, 3)
        self.assertIsInstance(moves[0], AdvanceMove)

    def test_capture_never_flagged_on_protected_cells(self):
        mover = self.red.tokens[0]
        victim = self.green.tokens[0]
        for track_index in range(Board.TRACK_LENGTH):
            with self.subTest(track=track_index):
                self.force_position(
                    self.red, 0, (track_index - 3) % Board.TRACK_LENGTH, total_steps=3
                )
                self.force_position(self.green, 0, track_index, total_steps=10)
                cell = Board.track_position(track_index)
                protected = Board.is_safe_cell(cell) or Board.is_entry_cell(cell)

                moves = self.moves_for(self.red, 3)
                self.assertEqual(len(moves), 1)
                self.assertIs(moves[0].token, mover)
                self.assertEqual(isinstance(moves[0], CaptureMove), not protected)
                captured = self.rules.check_capture(
                    cell, self.red.index, self.state.players
                )
                self.assertIs(captured, None if protected else victim)


    def test_entry_cell_capture_can_be_enabled(self):
        rules = Rules(config=Config(CAPTURE_ON_ENTRY_CELLS=True))
        self.force_position(self.red, 0, 10)
        self.force_position(self.green, 0, 13, total_steps=0)
        moves = rules.get_valid_moves(self.red, 3, self.state.players)
        self.assertIsInstance(moves[0], CaptureMove)

    def test_own_tokens_are_never_captured(self):
        self.force_position(self.red, 0, 5)
        self.force_position(self.red, 1, 8)
        moves = self.moves_for(self.red, 3)
        self.assertTrue(all(isinstance(m, AdvanceMove) for m in moves))

    def test_finish_move(self):
        self.force_home_path(self.red, 0, 2)
        moves = self.moves_for(self.red, 3)
        self.assertIsInstance(moves[0], FinishMove)
        self.assertEqual(moves[0].to_home_path_index, 5)

    def test_execute_capture(self):
        mover = self.force_position(self.red, 0, 5)
        victim = self.force_position(self.green, 0, 8, total_steps=47)
        self.state.set_dice_value(3)
        move = self.moves_for(self.red, 3)[0]
        self.assertTrue(self.rules.validate_move(move, self.state).success)

        result = self.rules.execute_move(move, self.state)
        self.assertIs(result.captured, victim)
        self.assertTrue(result.extra_turn)
        self.assertEqual(mover.track_index, 8)
        self.assertEqual(mover.total_steps, 8)
        self.assertTrue(victim.is_at_home())
        self.assertEqual(victim.total_steps, 0)
        self.assertEqual(self.red.captures, 1)
        record = self.state.move_history[-1]
        self.assertEqual(record.kind, MoveKind.CAPTURE)
        self.assertEqual(record.captured_token_id, "green_0")

    def test_execute_unlock_grants_extra_turn(self):
        self.state.set_dice_value(6)
        move = self.moves_for(self.red, 6)[0]
        result = self.rules.execute_move(move, self.state)
        self.assertTrue(result.extra_turn)
        self.assertEqual(self.red.tokens[0].track_index, 0)

    def test_plain_move_without_six_ends_turn(self):
        self.force_position(self.red, 0, 20)
        self.state.set_dice_value(4)
        move = self.moves_for(self.red, 4)[0]
        result = self.rules.execute_move(move, self.state)
        self.assertFalse(result.extra_turn)
        self.assertEqual(self.red.tokens[0].track_index, 24)

    def test_execute_finish_counts_token(self):
        token = self.force_home_path(self.red, 0, 4)
        self.state.set_dice_value(1)
        move = self.moves_for(self.red, 1)[0]
        result = self.rules.execute_move(move, self.state)
        self.assertTrue(result.finished)
        self.assertEqual(self.red.finished_tokens, 1)
        self.assertTrue(token.is_finished())
        self.assertIsNone(result.new_position)

    def test_validate_rejections(self):
        self.force_position(self.red, 0, 20)
        self.state.set_dice_value(4)
        move = self.moves_for(self.red, 4)[0]

        self.state.turn.dice_value = 5
        self.assertEqual(
            self.rules.validate_move(move, self.state).reason, "Dice value mismatch"
        )
        self.state.turn.dice_value = 4
        self.state.turn.current_player_index = 1
        self.assertEqual(
            self.rules.validate_move(move, self.state).reason, "Not your token"
        )
        self.state.turn.current_player_index = 0
        self.red.tokens[0].send_home()
        self.assertEqual(
            self.rules.validate_move(move, self.state).reason, "Token not active"
        )

    def test_validate_unlock_of_active_token(self):
        self.state.set_dice_value(6)
        move = self.moves_for(self.red, 6)[0]
        self.red.tokens[0].unlock()
        self.assertEqual(
            self.rules.validate_move(move, self.state).reason, "Token not at home"
        )

    def test_validate_rejects_finish_the_roll_cannot_reach(self):
        token = self.force_position(self.red, 0, 0, total_steps=0)
        self.state.set_dice_value(1)
        forged = FinishMove(
            token=token,
            dice_value=1,
            from_position=token.position,
            to_position=Board.home_path_position(self.red.color, 5),
            from_track_index=0,
            to_track_index=-1,
            from_home_path_index=-1,
            to_home_path_index=5,
            path=(),
            enters_home_path=True,
        )
        self.assertEqual(
            self.rules.validate_move(forged, self.state).reason, "Invalid selection"
        )
        self.assertTrue(token.is_active())
        self.assertEqual(self.red.finished_tokens, 0)

    def test_validate_rejects_jump_to_another_cell(self):
        self.force_position(self.red, 0, 20)
        self.state.set_dice_value(4)
        move = self.moves_for(self.red, 4)[0]
        self.assertTrue(self.rules.validate_move(move, self.state).success)
        forged = replace(move, to_track_index=40, to_position=Board.track_position(40))
        self.assertEqual(
            self.rules.validate_move(forged, self.state).reason, "Invalid selection"
        )

    def test_validate_rejects_overshooting_roll(self):
        token = self.force_home_path(self.red, 0, 4)
        self.state.set_dice_value(1)
        move = self.moves_for(self.red, 1)[0]
        self.state.set_dice_value(3)
        forged = replace(move, dice_value=3)
        self.assertEqual(
            self.rules.validate_move(forged, self.state).reason, "Overshoots home"
        )
        self.assertFalse(token.is_finished())

    def test_validate_rejects_capture_on_safe_cell(self):
        token = self.force_position(self.red, 0, 0)
        victim = self.force_position(self.green, 0, 2, total_steps=41)
        self.state.set_dice_value(2)
        move = self.moves_for(self.red, 2)[0]
        self.assertIsInstance(move, AdvanceMove)
        forged = CaptureMove(
            token=token,
            dice_value=2,
            from_position=move.from_position,
            to_position=move.to_position,
            from_track_index=move.from_track_index,
            to_track_index=move.to_track_index,
            from_home_path_index=move.from_home_path_index,
            to_home_path_index=move.to_home_path_index,
            path=move.path,
            enters_home_path=False,
            captured=victim,
        )
        self.assertEqual(
            self.rules.validate_move(forged, self.state).reason, "Invalid selection"
        )

    def test_validate_rejects_advance_that_skips_a_capture(self):
        self.force_position(self.red, 0, 5)
        victim = self.force_position(self.green, 0, 8, total_steps=47)
        self.state.set_dice_value(3)
        capture = self.moves_for(self.red, 3)[0]
        fields = {
            name: getattr(capture, name)
            for name in (
                "token",
                "dice_value",
                "from_position",
                "to_position",
                "from_track_index",
                "to_track_index",
                "from_home_path_index",
                "to_home_path_index",
                "path",
                "enters_home_path",
            )
        }
        self.assertEqual(
            self.rules.validate_move(AdvanceMove(**fields), self.state).reason,
            "Invalid selection",
        )
        self.assertTrue(victim.is_active())

    def test_validate_rejects_unlock_to_foreign_entry(self):
        self.state.set_dice_value(6)
        move = self.moves_for(self.red, 6)[0]
        forged = replace(move, to_track_index=13)
        self.assertEqual(
            self.rules.validate_move(forged, self.state).reason, "Invalid selection"
        )

    def test_turn_rules(self):
        self.assertTrue(self.rules.can_roll_again(6, 1))
        self.assertTrue(self.rules.can_roll_again(6, 2))
        self.assertFalse(self.rules.can_roll_again(6, 3))
        self.assertFalse(self.rules.can_roll_again(5, 0))
        self.assertTrue(self.rules.is_turn_forfeited(3))
        self.assertFalse(self.rules.is_turn_forfeited(2))

    def test_tokens_at_collects_every_occupant(self):
        a = self.force_position(self.red, 0, 2)
        b = self.force_position(self.green, 0, 2, total_steps=41)
        self.assertEqual(self.rules.tokens_at(a.position, self.state.players), [a, b])
        self.assertEqual(self.rules.tokens_at(None, self.state.players), [])

    def test_player_queries(self):
        self.force_position(self.red, 0, 20)
        self.red.tokens[1].state = TokenState.FINISHED
        self.assertEqual(len(self.red.get_home_tokens()), 2)
        self.assertEqual(len(self.red.get_active_tokens()), 1)
        self.assertEqual(self.red.get_finished_tokens(), [self.red.tokens[1]])
        self.assertIs(self.red.get_token_by_id("red_0"), self.red.tokens[0])
        self.assertTrue(self.red.can_move(3))
        self.assertFalse(self.green.can_move(3))
        self.assertTrue(self.green.can_move(6))
        self.assertAlmostEqual(self.red.overall_progress(), (20 / 58 + 1.0) / 4)

    def test_has_won_requires_all_four(self):
        self.red.finished_tokens = 3
        self.assertFalse(self.rules.has_won(self.red))
        self.red.finished_tokens = 4
        self.assertTrue(self.rules.has_won(self.red))


if __name__ == "__main__":
    unittest.main()


class TestPlayersFollowGameConfig(unittest.TestCase):
    def setUp(self):
        self.cfg = Config(TOKENS_PER_PLAYER=2)
        self.state = GameState.new_game(
            [PlayerSpec(name="A"), PlayerSpec(name="B")], config=self.cfg
        )
        self.rules = Rules(self.state.config)

    def test_token_count_and_win_use_game_config(self):
        red = self.state.players[0]
        self.assertIs(red.config, self.cfg)
        self.assertEqual(len(red.tokens), 2)
        for token in red.tokens:
            token.state = TokenState.FINISHED
        red.finished_tokens = 2
        self.assertTrue(red.has_won())
        self.assertTrue(self.rules.has_won(red))
        self.assertEqual(len(red.clone().tokens), 2)

    def test_restored_players_keep_game_config(self):
        restored = restore(snapshot(self.state), config=self.cfg)
        self.assertTrue(all(len(p.tokens) == 2 for p in restored.players))
        self.assertIs(restored.players[1].config, self.cfg)
