"""Tests for closing frames and moving to the next one.

Critical scenarios tested:
- Concession and endFrame winners
- Tied frames decided on a respotted black
- reRack of the current frame
"""

from app.schemas.snooker import Ball, Match, MatchStatus
from app.services.snooker.engine import MatchEventData, apply_event

from .conftest import PLAYER_1_ID, PLAYER_2_ID, apply_ok, pot_sequence, with_frame_points


class TestConcede:
    """Test frame concessions."""

    def test_concede_gives_frame_to_opponent(self, best_of_three_frames: Match):
        match = apply_ok(best_of_three_frames, "concede")

        first = match.score.frames[0]
        assert first.winner_player_id == PLAYER_2_ID
        assert first.decided_on_black is False

    def test_concede_opens_next_frame(self, best_of_three_frames: Match):
        match = pot_sequence(best_of_three_frames, [Ball.RED, Ball.BLACK])
        match = apply_ok(match, "concede")

        assert len(match.score.frames) == 2
        second = match.score.frames[1]
        assert (second.set_no, second.frame_no) == (1, 2)
        assert second.p1_points == 0
        assert second.p2_points == 0
        assert match.current.frame_number == 2
        assert match.current.reds_remaining == 15
        assert match.current.break_points == 0
        assert match.current.points_on_table == 147
        assert match.status == MatchStatus.LIVE

    def test_concede_ignores_score(self, best_of_three_frames: Match):
        """A player ahead on points can still concede."""
        match = with_frame_points(best_of_three_frames, 60, 10)
        match = apply_ok(match, "concede")
        assert match.score.frames[0].winner_player_id == PLAYER_2_ID

    def test_concede_on_level_scores_does_not_respot(self, best_of_three_frames: Match):
        match = with_frame_points(best_of_three_frames, 20, 20)
        match = apply_ok(match, "concede")

        assert match.score.frames[0].winner_player_id == PLAYER_2_ID
        assert match.score.frames[0].decided_on_black is False

    def test_frames_only_match_keeps_set_record(self, best_of_three_frames: Match):
        match = apply_ok(best_of_three_frames, "concede")

        assert len(match.score.sets) == 1
        assert match.score.sets[0].p2_frames == 1
        assert match.score.sets[0].winner_player_id is None


class TestEndFrame:
    """Test endFrame awarding the frame on points."""

    def test_leader_wins_frame(self, best_of_three_frames: Match):
        match = with_frame_points(best_of_three_frames, 50, 20)
        match = apply_ok(match, "endFrame")

        assert match.score.frames[0].winner_player_id == PLAYER_1_ID
        assert match.current.frame_number == 2

    def test_trailing_player_one_loses(self, best_of_three_frames: Match):
        match = with_frame_points(best_of_three_frames, 12, 40)
        match = apply_ok(match, "endFrame")
        assert match.score.frames[0].winner_player_id == PLAYER_2_ID

    def test_highest_break_kept_on_frame(self, best_of_three_frames: Match):
        match = pot_sequence(best_of_three_frames, [Ball.RED, Ball.BLACK, Ball.RED, Ball.PINK])
        match = apply_ok(match, "endTurn")
        match = pot_sequence(match, [Ball.RED, Ball.BLUE])
        match = apply_ok(match, "endFrame")

        first = match.score.frames[0]
        assert first.highest_break == 15
        assert first.p1_points == 15
        assert first.p2_points == 6


class TestRespottedBlack:
    """Test frames that end level."""

    def test_tie_respots_black(self, new_match: Match):
        match = with_frame_points(new_match, 67, 67)

        result = apply_event(match, MatchEventData(action="endFrame"))

        assert result.valid
        match = result.match
        frame = match.score.frames[0]
        assert frame.decided_on_black is True
        assert frame.winner_player_id is None
        assert match.status == MatchStatus.LIVE

        current = match.current
        assert current.reds_remaining == 0
        assert current.colors_phase is True
        assert current.colors_order_index == 5
        assert current.points_on_table == 7

    def test_only_black_is_on(self, new_match: Match):
        match = apply_ok(with_frame_points(new_match, 67, 67), "endFrame")

        result = apply_event(match, MatchEventData(action="pot", ball=Ball.PINK))
        assert not result.valid

    def test_potting_black_decides_frame(self, new_match: Match):
        match = apply_ok(with_frame_points(new_match, 67, 67), "endFrame")

        match = apply_ok(match, "pot", Ball.BLACK)

        frame = match.score.frames[0]
        assert frame.p1_points == 74
        assert frame.winner_player_id == PLAYER_1_ID
        assert frame.decided_on_black is True
        assert match.status == MatchStatus.COMPLETED
        assert match.score.match.winner_player_id == PLAYER_1_ID

    def test_foul_on_black_decides_frame(self, new_match: Match):
        match = apply_ok(with_frame_points(new_match, 67, 67), "endFrame")

        match = apply_ok(match, "foul", Ball.BLACK)

        frame = match.score.frames[0]
        assert frame.p2_points == 74
        assert frame.winner_player_id == PLAYER_2_ID

    def test_respot_then_next_frame(self, best_of_three_frames: Match):
        match = apply_ok(with_frame_points(best_of_three_frames, 30, 30), "endFrame")
        match = apply_ok(match, "pot", Ball.BLACK)

        assert match.score.frames[0].winner_player_id == PLAYER_1_ID
        assert match.current.frame_number == 2
        assert match.current.reds_remaining == 15
        assert match.current.colors_phase is False


class TestReRack:
    """Test restarting the current frame."""

    def test_re_rack_resets_frame(self, new_match: Match):
        match = pot_sequence(new_match, [Ball.RED, Ball.BLACK, Ball.RED])
        match = apply_ok(match, "reRack")

        current = match.current
        assert current.reds_remaining == 15
        assert current.colors_phase is False
        assert current.break_points == 0
        assert current.last_ball_potted_in_break is None
        assert current.points_on_table == 147

        frame = match.score.frames[0]
        assert frame.p1_points == 0
        assert frame.p2_points == 0
        assert frame.highest_break is None

    def test_re_rack_keeps_frame_number_and_history(self, best_of_three_frames: Match):
        match = apply_ok(best_of_three_frames, "concede")
        match = apply_ok(match, "pot", Ball.RED)
        match = apply_ok(match, "reRack")

        assert match.current.frame_number == 2
        assert len(match.score.frames) == 2
        assert match.score.frames[0].winner_player_id == PLAYER_2_ID
        assert len(match.history) == 3
