import tempfile
import unittest
from pathlib import Path

from ludo_race.board import Board
from ludo_race.dice import Dice
from ludo_race.exceptions import ActionPayloadError, SnapshotError
from ludo_race.game import GameState, PlayerSpec
from ludo_race.serialization import (
    DiceRollAction,
    MoveAction,
    TurnEndAction,
    action_from_dict,
    dumps,
    load_game,
    loads,
    move_from_payload,
    move_to_payload,
    restore,
    save_game,
    snapshot,
)
from ludo_race.token import TokenState
from ludo_race.turn_manager import Pacing, TurnManager
from ludo_race.types import CaptureMove, TurnPhase


def force_position(player, slot, track_index, total_steps):
    token = player.tokens[slot]
    token.state = TokenState.ACTIVE
    token.track_index = track_index
    token.home_path_index = -1
    token.total_steps = total_steps
    return token


class TestSnapshots(unittest.TestCase):
    def setUp(self):
        self.state = GameState.new_game(
            [PlayerSpec(name="Ann"), PlayerSpec(name="Bo", is_ai=True)]
        )
        red, green = self.state.players
        force_position(red, 0, 50, 51)
        force_position(red, 1, 10, 10)
        force_position(green, 0, 30, 17)
        red.tokens[2].state = TokenState.FINISHED
        red.finished_tokens = 1

    def test_restored_game_calculates_identical_moves(self):
        restored = loads(dumps(self.state))
        for original, copy in zip(self.state.all_tokens(), restored.all_tokens()):
            self.assertEqual(original.id, copy.id)
            self.assertEqual(original.state, copy.state)
            for steps in range(1, 7):
                self.assertEqual(original.calculate_move(steps), copy.calculate_move(steps))

    def test_snapshot_contents(self):
        data = snapshot(self.state)
        self.assertEqual(data["turn_phase"], "WAITING")
        self.assertEqual(data["players"][1]["is_ai"], True)
        token = data["players"][0]["tokens"][0]
        self.assertEqual(token["id"], "red_0")
        self.assertEqual(token["total_steps"], 51)
        self.assertEqual(token["position"], Board.track_position(50).to_dict())
        self.assertIsNone(data["players"][0]["tokens"][2]["position"])
        self.assertIsNone(data["players"][0]["tokens"][3]["position"])

    def test_position_must_match_indices(self):
        data = snapshot(self.state)
        data["players"][0]["tokens"][1]["position"] = Board.track_position(11).to_dict()
        with self.assertRaises(SnapshotError):
            restore(data)
        data = snapshot(self.state)
        data["players"][0]["tokens"][1]["position"] = {"row": 1}
        with self.assertRaises(SnapshotError):
            restore(data)

    def test_exact_restore_recomputes_pending_moves(self):
        self.state.set_dice_value(3)
        self.state.turn.phase = TurnPhase.SELECTING
        restored = loads(dumps(self.state), resume_turn=True)
        self.assertEqual(restored.turn.phase, TurnPhase.SELECTING)
        self.assertEqual(restored.turn.dice_value, 3)
        self.assertEqual(
            [m.token_id for m in restored.turn.valid_moves], ["red_0", "red_1"]
        )

    def test_load_game_restarts_turn_at_roll(self):
        self.state.set_dice_value(3)
        self.state.turn.phase = TurnPhase.SELECTING
        with tempfile.TemporaryDirectory() as tmp:
            path = save_game(self.state, Path(tmp) / "save.json")
            restored = load_game(path)
        self.assertEqual(restored.turn.phase, TurnPhase.WAITING)
        self.assertIsNone(restored.turn.dice_value)
        self.assertEqual(restored.players[0].finished_tokens, 1)
        self.assertEqual(restored.players[1].name, "Bo")

    def test_corrupt_snapshots_raise(self):
        data = snapshot(self.state)
        # Active on both paths at once
        data["players"][0]["tokens"][0]["track_index"] = 3
        data["players"][0]["tokens"][0]["home_path_index"] = 2
        with self.assertRaises(SnapshotError):
            restore(data)
        with self.assertRaises(SnapshotError):
            loads("{not json")
        data = snapshot(self.state)
        data["players"][0]["finished_tokens"] = 3
        with self.assertRaises(SnapshotError):
            restore(data)
        data = snapshot(self.state)
        del data["players"]
        with self.assertRaises(SnapshotError):
            restore(data)


class TestRelayActions(unittest.TestCase):
    def setUp(self):
        specs = [PlayerSpec(name="Host"), PlayerSpec(name="Guest")]
        self.host_state = GameState.new_game(specs, mode="online")
        self.peer_state = GameState.new_game(specs, mode="online")
        self.sent = []
        self.host_dice = Dice(seed=3)
        self.host = TurnManager(
            self.host_state,
            dice=self.host_dice,
            pacing=Pacing(),
            on_action=self.sent.append,
        )
        self.peer = TurnManager(self.peer_state, pacing=Pacing())
        for state in (self.host_state, self.peer_state):
            red, green = state.players
            force_position(red, 0, 5, 5)
            force_position(green, 0, 8, 47)

    def forward(self):
        for action in self.sent:
            result = self.peer.apply_remote_action(action.to_dict())
            self.assertTrue(result.success, result.reason)
        self.sent.clear()

    def test_capture_replays_on_peer(self):
        self.host_dice.queue_rolls(3)
        self.host.roll_dice()
        self.assertEqual(
            [type(a) for a in self.sent], [DiceRollAction, MoveAction]
        )
        self.forward()

        peer_red, peer_green = self.peer_state.players
        self.assertEqual(peer_red.tokens[0].track_index, 8)
        self.assertTrue(peer_green.tokens[0].is_at_home())
        self.assertEqual(peer_green.tokens[0].total_steps, 0)
        self.assertEqual(self.peer_state.turn.current_player_index, 0)
        self.assertEqual(self.peer_state.turn.phase, TurnPhase.WAITING)

    def test_tampered_remote_move_is_rejected(self):
        self.host_dice.queue_rolls(3)
        self.host.roll_dice()
        roll, move = self.sent[:2]
        self.assertTrue(self.peer.apply_remote_action(roll.to_dict()).success)

        data = move.to_dict()
        data["payload"]["move"] = dict(data["payload"]["move"], to_track_index=30)
        result = self.peer.apply_remote_action(data)
        self.assertFalse(result.success)
        self.assertEqual(result.reason, "Invalid selection")

        peer_red, peer_green = self.peer_state.players
        self.assertEqual(peer_red.tokens[0].track_index, 5)
        self.assertTrue(peer_green.tokens[0].is_active())
        self.assertEqual(self.peer_state.turn.phase, TurnPhase.SELECTING)

    def test_turn_end_replays_on_peer(self):
        self.host_dice.queue_rolls(2)
        self.host.roll_dice()
        self.assertIsInstance(self.sent[-1], TurnEndAction)
        self.forward()
        self.assertEqual(self.peer_state.turn.current_player_index, 1)
        self.assertEqual(self.peer_state.players[0].tokens[0].track_index, 7)

    def test_no_move_turn_end_replays_on_peer(self):
        for state in (self.host_state, self.peer_state):
            state.players[0].tokens[0].send_home()
        self.host_dice.queue_rolls(4)
        self.host.roll_dice()
        self.assertEqual([type(a) for a in self.sent], [DiceRollAction, TurnEndAction])
        self.forward()
        self.assertEqual(self.peer_state.turn.current_player_index, 1)

    def test_remote_action_for_wrong_player(self):
        result = self.peer.apply_remote_action(DiceRollAction(1, 4, 0))
        self.assertFalse(result.success)
        self.assertEqual(result.reason, "Player index mismatch")

    def test_move_payload_round_trip(self):
        moves = self.host.rules.get_valid_moves(
            self.host_state.players[0], 3, self.host_state.players
        )
        payload = move_to_payload(moves[0])
        rebuilt = move_from_payload(self.peer_state, payload)
        self.assertIsInstance(rebuilt, CaptureMove)
        self.assertIs(rebuilt.token, self.peer_state.get_token("red_0"))
        self.assertIs(rebuilt.captured, self.peer_state.get_token("green_0"))

    def test_malformed_payloads(self):
        with self.assertRaises(ActionPayloadError):
            action_from_dict({"type": "EMOTE", "payload": {}})
        with self.assertRaises(ActionPayloadError):
            action_from_dict({"type": "DICE_ROLL", "payload": {"value": 3}})
        with self.assertRaises(ActionPayloadError):
            move_from_payload(self.peer_state, {"token_id": "purple_9"})


if __name__ == "__main__":
    unittest.main()
