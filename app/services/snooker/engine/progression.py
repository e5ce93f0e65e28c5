"""Frame, set and match progression.

Win-condition checks and the transitions that close a frame and open the
next one. The mutating helpers here only ever receive the engine's working
copy of a match, never the caller's match.
"""

import logging
import math

logger = logging.getLogger(__name__)

from app.schemas.snooker import (
    FrameScore,
    Match,
    MatchFormat,
    MatchState,
    MatchStatus,
    SetScore,
)

from .rules import (
    COLORS_ORDER,
    INITIAL_REDS,
    ball_value,
    initial_points_on_table,
    should_respot_black,
)


def get_current_frame(match: Match) -> FrameScore | None:
    """FrameScore for the set/frame the cursor points at."""
    set_no = match.current.set_number
    frame_no = match.current.frame_number
    return next(
        (f for f in match.score.frames if f.set_no == set_no and f.frame_no == frame_no),
        None,
    )


def get_set_score(match: Match, set_no: int) -> SetScore | None:
    return next((s for s in match.score.sets if s.set_no == set_no), None)


def get_opponent_id(match: Match, player_id: str) -> str:
    if match.player1_id == player_id:
        return match.player2_id
    return match.player1_id


def add_points_to_player(match: Match, player_id: str, points: int) -> None:
    """Credit points to a player in the current frame."""
    frame = get_current_frame(match)
    if frame is None:
        logger.warning(
            "No frame for set=%d frame=%d, %d points not recorded",
            match.current.set_number,
            match.current.frame_number,
            points,
        )
        return

    if player_id == match.player1_id:
        frame.p1_points += points
    else:
        frame.p2_points += points


def player_frame_points(match: Match, player_id: str) -> tuple[int, int]:
    """(player's points, opponent's points) in the current frame."""
    frame = get_current_frame(match)
    if frame is None:
        return 0, 0
    if player_id == match.player1_id:
        return frame.p1_points, frame.p2_points
    return frame.p2_points, frame.p1_points


def is_frame_over(state: MatchState) -> bool:
    return state.colors_phase and state.colors_order_index >= len(COLORS_ORDER)


def reset_frame_state(state: MatchState) -> None:
    """Put the frame-local cursor fields back to a full rack."""
    state.reds_remaining = INITIAL_REDS
    state.colors_phase = False
    state.colors_order_index = 0
    state.break_points = 0
    state.freeball_active = False
    state.snookers_required = False
    state.last_ball_potted_in_break = None
    state.points_on_table = initial_points_on_table()


def respot_black(state: MatchState) -> None:
    """Leave only the black on the table for a tie-break."""
    state.reds_remaining = 0
    state.colors_phase = True
    state.colors_order_index = len(COLORS_ORDER) - 1
    state.break_points = 0
    state.freeball_active = False
    state.last_ball_potted_in_break = None
    state.points_on_table = ball_value(COLORS_ORDER[-1])


def frames_to_win_set(match_format: MatchFormat) -> int:
    return math.ceil(match_format.frames_per_set / 2)


def sets_to_win_match(match_format: MatchFormat) -> int:
    return math.ceil(match_format.best_of_sets / 2)


def is_set_complete(match_format: MatchFormat, set_score: SetScore | None) -> bool:
    """Only meaningful when sets are enabled."""
    if set_score is None or not match_format.sets_enabled:
        return False
    return max(set_score.p1_frames, set_score.p2_frames) >= frames_to_win_set(match_format)


def count_frames_won(match: Match) -> tuple[int, int]:
    p1 = sum(1 for f in match.score.frames if f.winner_player_id == match.player1_id)
    p2 = sum(1 for f in match.score.frames if f.winner_player_id == match.player2_id)
    return p1, p2


def count_sets_won(match: Match) -> tuple[int, int]:
    p1 = sum(1 for s in match.score.sets if s.winner_player_id == match.player1_id)
    p2 = sum(1 for s in match.score.sets if s.winner_player_id == match.player2_id)
    return p1, p2


def is_match_complete(match: Match) -> bool:
    """Frames-only: decided frames reach best_of_sets. Sets: a player holds a majority of sets."""
    if not match.format.sets_enabled:
        decided = sum(1 for f in match.score.frames if f.winner_player_id is not None)
        return decided >= match.format.best_of_sets

    p1_sets, p2_sets = count_sets_won(match)
    return max(p1_sets, p2_sets) >= sets_to_win_match(match.format)


def derive_match_winner(match: Match) -> str | None:
    """Leader on frames (frames-only) or sets (sets format). None on a tie.

    Reads the score only, so repeated calls give the same answer.
    """
    if match.format.sets_enabled:
        p1, p2 = count_sets_won(match)
    else:
        p1, p2 = count_frames_won(match)

    if p1 > p2:
        return match.player1_id
    if p2 > p1:
        return match.player2_id
    return None


def apply_match_winner(match: Match) -> None:
    """Refresh the set tally and record the match winner if none is set yet."""
    totals = match.score.match
    totals.p1_sets, totals.p2_sets = count_sets_won(match)
    if totals.winner_player_id is None:
        totals.winner_player_id = derive_match_winner(match)
        if totals.winner_player_id is not None:
            logger.info("Match winner recorded: match=%s, winner=%s", match.id, totals.winner_player_id)


def update_set_score(match: Match, winner_id: str) -> SetScore:
    """Count a frame win in the current set, opening the set record if needed."""
    set_no = match.current.set_number
    set_score = get_set_score(match, set_no)
    if set_score is None:
        set_score = SetScore(set_no=set_no)
        match.score.sets.append(set_score)
        logger.debug("Opened set record: set=%d", set_no)

    if winner_id == match.player1_id:
        set_score.p1_frames += 1
    else:
        set_score.p2_frames += 1
    return set_score


def start_next_frame(match: Match, set_complete: bool) -> None:
    """Move the cursor to a fresh frame, in the next set if this one is done."""
    state = match.current
    if set_complete:
        state.set_number += 1
        state.frame_number = 1
    else:
        state.frame_number += 1

    reset_frame_state(state)
    match.score.frames.append(
        FrameScore(set_no=state.set_number, frame_no=state.frame_number)
    )
    logger.info(
        "Next frame started: match=%s, set=%d, frame=%d",
        match.id,
        state.set_number,
        state.frame_number,
    )


def finalize_frame(match: Match, winner_id: str | None = None) -> None:
    """Close the current frame and move the match on.

    Without an explicit winner the frame goes to the player with more points.
    A tie is not broken here: the frame is flagged as decided on a respotted
    black and stays open.

    Args:
        match: Working copy of the match.
        winner_id: Winner imposed by a concession, if any.
    """
    frame = get_current_frame(match)
    if frame is None:
        logger.warning(
            "finalize_frame found no frame: match=%s, set=%d, frame=%d",
            match.id,
            match.current.set_number,
            match.current.frame_number,
        )
        return

    if frame.winner_player_id is not None:
        # A frame is finalized once; later closes leave the record alone
        logger.warning(
            "Frame already decided: match=%s, set=%d, frame=%d, winner=%s",
            match.id,
            frame.set_no,
            frame.frame_no,
            frame.winner_player_id,
        )
        return

    if winner_id is None:
        if should_respot_black(frame.p1_points, frame.p2_points):
            frame.decided_on_black = True
            respot_black(match.current)
            logger.info(
                "Frame tied at %d-%d, black respotted: match=%s, set=%d, frame=%d",
                frame.p1_points,
                frame.p2_points,
                match.id,
                frame.set_no,
                frame.frame_no,
            )
            return
        winner_id = match.player1_id if frame.p1_points > frame.p2_points else match.player2_id

    frame.winner_player_id = winner_id
    logger.info(
        "Frame won: match=%s, set=%d, frame=%d, winner=%s, score=%d-%d",
        match.id,
        frame.set_no,
        frame.frame_no,
        winner_id,
        frame.p1_points,
        frame.p2_points,
    )

    set_score = update_set_score(match, winner_id)
    set_complete = is_set_complete(match.format, set_score)
    if set_complete:
        set_score.winner_player_id = winner_id
        match.score.match.p1_sets, match.score.match.p2_sets = count_sets_won(match)
        logger.info(
            "Set won: match=%s, set=%d, winner=%s, frames=%d-%d",
            match.id,
            set_score.set_no,
            winner_id,
            set_score.p1_frames,
            set_score.p2_frames,
        )

    if is_match_complete(match):
        apply_match_winner(match)
        match.status = MatchStatus.COMPLETED
        logger.info("Match completed: match=%s", match.id)
        return

    start_next_frame(match, set_complete)
