"""Tests for set and match completion."""

from app.schemas.snooker import Ball, Match, MatchStatus
from app.services.snooker.engine import MatchEventData, apply_event, derive_match_winner
from app.services.snooker.engine.progression import apply_match_winner, is_match_complete

from .conftest import (
    MAXIMUM_BREAK,
    PLAYER_1_ID,
    PLAYER_2_ID,
    apply_ok,
    create_match,
    pot_sequence,
    win_frame,
)


class TestFramesOnlyMatch:
    """Frames-only matches finish once best_of_sets frames are decided."""

    def test_match_runs_all_frames(self, best_of_three_frames: Match):
        match = win_frame(best_of_three_frames, PLAYER_1_ID)
        match = win_frame(match, PLAYER_1_ID)

        # two decided frames out of three, still live
        assert match.status == MatchStatus.LIVE
        assert match.current.frame_number == 3
        assert match.score.match.winner_player_id is None

    def test_match_completes_after_last_frame(self, best_of_three_frames: Match):
        match = win_frame(best_of_three_frames, PLAYER_1_ID)
        match = win_frame(match, PLAYER_2_ID)
        match = win_frame(match, PLAYER_1_ID)

        assert match.status == MatchStatus.COMPLETED
        assert match.score.match.winner_player_id == PLAYER_1_ID
        assert len(match.score.frames) == 3
        assert match.current.frame_number == 3

    def test_single_frame_match(self, new_match: Match):
        match = win_frame(new_match, PLAYER_2_ID)

        assert match.status == MatchStatus.COMPLETED
        assert match.score.match.winner_player_id == PLAYER_2_ID
        assert len(match.score.frames) == 1


class TestSetsMatch:
    """Sets-enabled matches, best of three sets of three frames."""

    def test_set_won_after_majority_of_frames(self, best_of_three_sets: Match):
        match = win_frame(best_of_three_sets, PLAYER_1_ID)
        match = win_frame(match, PLAYER_1_ID)

        first_set = match.score.sets[0]
        assert first_set.winner_player_id == PLAYER_1_ID
        assert (first_set.p1_frames, first_set.p2_frames) == (2, 0)
        assert match.score.match.p1_sets == 1
        assert match.score.match.p2_sets == 0

    def test_next_set_starts_at_frame_one(self, best_of_three_sets: Match):
        match = win_frame(best_of_three_sets, PLAYER_1_ID)
        match = win_frame(match, PLAYER_1_ID)

        assert match.current.set_number == 2
        assert match.current.frame_number == 1
        last = match.score.frames[-1]
        assert (last.set_no, last.frame_no) == (2, 1)
        assert match.status == MatchStatus.LIVE

    def test_set_not_won_before_majority(self, best_of_three_sets: Match):
        match = win_frame(best_of_three_sets, PLAYER_1_ID)
        match = win_frame(match, PLAYER_2_ID)

        assert match.score.sets[0].winner_player_id is None
        assert match.current.set_number == 1
        assert match.current.frame_number == 3

    def test_match_won_on_sets(self, best_of_three_sets: Match):
        match = best_of_three_sets
        for winner in [PLAYER_2_ID, PLAYER_2_ID, PLAYER_1_ID, PLAYER_1_ID, PLAYER_2_ID, PLAYER_1_ID, PLAYER_2_ID]:
            match = win_frame(match, winner)

        # set 1 to player 2, set 2 to player 1, set 3 to player 2
        assert match.status == MatchStatus.COMPLETED
        assert match.score.match.winner_player_id == PLAYER_2_ID
        assert match.score.match.p1_sets == 1
        assert match.score.match.p2_sets == 2
        assert [s.winner_player_id for s in match.score.sets] == [
            PLAYER_2_ID,
            PLAYER_1_ID,
            PLAYER_2_ID,
        ]

    def test_frame_keys_follow_sets(self, best_of_three_sets: Match):
        match = best_of_three_sets
        for winner in [PLAYER_1_ID, PLAYER_1_ID, PLAYER_1_ID, PLAYER_1_ID]:
            match = win_frame(match, winner)

        keys = [(f.set_no, f.frame_no) for f in match.score.frames]
        assert keys == [(1, 1), (1, 2), (2, 1), (2, 2)]
        assert match.status == MatchStatus.COMPLETED


class TestEndMatch:
    """Test ending a match early."""

    def test_end_match_records_leader(self, best_of_three_frames: Match):
        match = win_frame(best_of_three_frames, PLAYER_2_ID)

        result = apply_event(match, MatchEventData(action="endMatch"))

        assert result.valid
        assert result.match.status == MatchStatus.COMPLETED
        assert result.match.score.match.winner_player_id == PLAYER_2_ID

    def test_end_match_without_frames_has_no_winner(self, new_match: Match):
        match = apply_ok(new_match, "endMatch")

        assert match.status == MatchStatus.COMPLETED
        assert match.score.match.winner_player_id is None

    def test_end_match_keeps_existing_winner(self, new_match: Match):
        match = win_frame(new_match, PLAYER_1_ID)
        match = apply_ok(match, "endMatch")

        assert match.score.match.winner_player_id == PLAYER_1_ID

    def test_end_match_on_sets(self, best_of_three_sets: Match):
        match = win_frame(best_of_three_sets, PLAYER_2_ID)
        match = win_frame(match, PLAYER_2_ID)
        match = apply_ok(match, "endMatch")

        assert match.score.match.winner_player_id == PLAYER_2_ID
        assert match.score.match.p2_sets == 1


class TestWinnerDerivation:
    """Test the winner helpers directly."""

    def test_derive_winner_is_repeatable(self, best_of_three_frames: Match):
        match = win_frame(best_of_three_frames, PLAYER_1_ID)

        assert derive_match_winner(match) == PLAYER_1_ID
        assert derive_match_winner(match) == PLAYER_1_ID

    def test_derive_winner_on_level_score(self, best_of_three_frames: Match):
        match = win_frame(best_of_three_frames, PLAYER_1_ID)
        match = win_frame(match, PLAYER_2_ID)
        assert derive_match_winner(match) is None

    def test_apply_winner_twice(self, best_of_three_frames: Match):
        match = win_frame(best_of_three_frames, PLAYER_1_ID)
        working = match.model_copy(deep=True)

        apply_match_winner(working)
        apply_match_winner(working)

        assert working.score.match.winner_player_id == PLAYER_1_ID

    def test_is_match_complete_counts_decided_frames(self):
        match = create_match(best_of_sets=2)
        assert not is_match_complete(match)

        match = win_frame(match, PLAYER_1_ID)
        assert not is_match_complete(match)
        match = win_frame(match, PLAYER_1_ID)
        assert is_match_complete(match)


class TestAfterCompletion:
    """Events after the match ends are accepted but never reopen a decided frame."""

    def test_second_concession_does_not_count_twice(self, new_match: Match):
        match = apply_ok(new_match, "concede")

        match = apply_ok(match, "concede")

        frame = match.score.frames[0]
        assert frame.winner_player_id == PLAYER_2_ID
        assert (match.score.sets[0].p1_frames, match.score.sets[0].p2_frames) == (0, 1)
        assert match.score.match.winner_player_id == PLAYER_2_ID
        assert match.status == MatchStatus.COMPLETED

    def test_end_frame_does_not_respot_decided_frame(self, new_match: Match):
        match = apply_ok(new_match, "concede")
        before = match.current

        match = apply_ok(match, "endFrame")

        frame = match.score.frames[0]
        assert frame.decided_on_black is False
        assert frame.winner_player_id == PLAYER_2_ID
        assert match.current == before

        result = apply_event(match, MatchEventData(action="pot", ball=Ball.BLACK))
        assert not result.valid
        assert result.match.score.frames[0].winner_player_id == PLAYER_2_ID
        assert len(result.match.score.sets) == 1
        assert result.match.score.sets[0].p2_frames == 1
        assert result.match.score.match.winner_player_id == PLAYER_2_ID

    def test_end_frame_after_maximum(self, new_match: Match):
        match = pot_sequence(new_match, MAXIMUM_BREAK)

        match = apply_ok(match, "endFrame")

        assert match.score.frames[0].winner_player_id == PLAYER_1_ID
        assert match.score.sets[0].p1_frames == 1
        assert match.score.match.winner_player_id == PLAYER_1_ID
