import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .constants import Difficulty, GameConstants

load_dotenv()


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(slots=True)
class Config:
    NUM_PLAYERS: int = int(os.getenv("NUM_PLAYERS", 4))
    # --- Board ---
    TRACK_LENGTH: int = GameConstants.TRACK_LENGTH
    HOME_STRETCH_LENGTH: int = GameConstants.HOME_STRETCH_LENGTH
    TOKENS_PER_PLAYER: int = GameConstants.TOKENS_PER_PLAYER

    # --- Dice and turn rules ---
    DICE_MIN: int = GameConstants.DICE_MIN
    DICE_MAX: int = GameConstants.DICE_MAX
    UNLOCK_VALUE: int = GameConstants.UNLOCK_VALUE
    MAX_CONSECUTIVE_SIXES: int = int(
        os.getenv("MAX_CONSECUTIVE_SIXES", GameConstants.MAX_CONSECUTIVE_SIXES)
    )

    # Steps a token must have walked before it may turn into its home stretch
    LAP_ELIGIBILITY_STEPS: int = int(
        os.getenv("LAP_ELIGIBILITY_STEPS", GameConstants.TRACK_LENGTH - 1)
    )
    # When false, entry cells protect their occupants like safe zones
    CAPTURE_ON_ENTRY_CELLS: bool = _env_flag("CAPTURE_ON_ENTRY_CELLS")

    MAX_TURNS: int = int(os.getenv("MAX_TURNS", 2000))
    THREAT_RANGE: int = 6

    def __post_init__(self):
        if self.NUM_PLAYERS < 2 or self.NUM_PLAYERS > 4:
            raise ValueError("NUM_PLAYERS must be between 2 and 4")
        if self.MAX_CONSECUTIVE_SIXES < 1:
            raise ValueError("MAX_CONSECUTIVE_SIXES must be positive")
        if self.LAP_ELIGIBILITY_STEPS < 0:
            raise ValueError("LAP_ELIGIBILITY_STEPS must be non-negative")


@dataclass(slots=True)
class HeuristicWeights:
    # Shared move scoring
    capture: float = float(os.getenv("WEIGHT_CAPTURE", 100))
    captured_progress_factor: float = 0.5
    finish: float = float(os.getenv("WEIGHT_FINISH", 150))
    unlock: float = float(os.getenv("WEIGHT_UNLOCK", 60))
    unlock_bonus_no_active: float = 40
    unlock_bonus_one_active: float = 20
    advance: float = 1
    enter_home_path: float = 80
    reach_safe: float = 40
    escape_danger: float = 50
    protect_lead: float = 20
    danger_penalty: float = 30

    # Board-state evaluation
    board_finished: float = 1000
    board_step: float = 5
    board_home_path: float = 100
    board_home_path_step: float = 20
    board_safe: float = 30
    board_danger: float = 40

    # Medium tier
    medium_jitter: float = 10

    # Hard tier
    future_risk_factor: float = 15
    entry_risk_factor: float = 10
    home_stretch_depth_bonus: float = 15
    defensive_safe_bonus: float = 25
    early_unlock_bonus: float = 30
    early_capture_penalty: float = 10
    mid_capture_bonus: float = 20
    mid_enter_home_bonus: float = 25
    late_finish_bonus: float = 50
    late_enter_home_bonus: float = 40
    late_capture_bonus: float = 30
    early_progress_threshold: float = 0.25
    early_finished_threshold: int = 2
    mid_progress_threshold: float = 0.6
    mid_finished_threshold: int = 8


@dataclass(slots=True)
class DifficultySettings:
    easy_randomness: float = float(os.getenv("EASY_RANDOMNESS", 0.7))
    medium_randomness: float = float(os.getenv("MEDIUM_RANDOMNESS", 0.3))
    hard_randomness: float = float(os.getenv("HARD_RANDOMNESS", 0.05))
    easy_think_ms: int = int(os.getenv("EASY_THINK_MS", 500))
    medium_think_ms: int = int(os.getenv("MEDIUM_THINK_MS", 800))
    hard_think_ms: int = int(os.getenv("HARD_THINK_MS", 1000))

    def randomness(self, difficulty: Difficulty) -> float:
        return getattr(self, f"{difficulty.value}_randomness")

    def think_time_ms(self, difficulty: Difficulty) -> int:
        return getattr(self, f"{difficulty.value}_think_ms")


@dataclass(slots=True)
class PacingConfig:
    dice_roll_ms: int = 800
    token_move_ms: int = 300
    turn_delay_ms: int = 500
    ai_think_ms: int = 800
    message_ms: int = 2000
    # 0 disables every delay; 1 plays at the presentation speed
    scale: float = float(os.getenv("PACING_SCALE", 0.0))


config = Config()
weights = HeuristicWeights()
difficulty_settings = DifficultySettings()
pacing_config = PacingConfig()
