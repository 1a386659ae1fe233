import pytest

from numberguessr.services.game import (
    AlreadyInRoom,
    InvalidSettings,
    InvalidTransition,
    NameTaken,
    OutOfRange,
    Player,
    Room,
    RoomFull,
    RoomSettings,
)
from numberguessr.services.game.evaluation import CORRECT, HIGHER, LOWER, evaluate_guess, truthful_feedback
from numberguessr.services.game.room import FINISHED, PICKING, PLAYING, WAITING, Picking, Playing, Waiting


def make_room(min_=1, max_=10):
    return Room('ABCD', RoomSettings(min_, max_), Player('sid-1', 'tok-1', 'Alice'), is_public=True)


def playing_room(p1_secret=4, p2_secret=7):
    room = make_room()
    room.seat(Player('sid-2', 'tok-2', 'Bob'))
    room.pick('sid-1', p1_secret)
    room.pick('sid-2', p2_secret)
    return room


def test_truthful_feedback():
    assert truthful_feedback(2, 7) == HIGHER
    assert truthful_feedback(9, 7) == LOWER
    assert truthful_feedback(7, 7) == CORRECT


def test_lie_inverts_feedback_when_available():
    assert evaluate_guess(2, 7, lie_requested=True, lie_available=True) == (LOWER, True)
    assert evaluate_guess(9, 7, lie_requested=True, lie_available=True) == (HIGHER, True)


def test_lie_on_correct_number_reports_higher():
    assert evaluate_guess(7, 7, lie_requested=True, lie_available=True) == (HIGHER, True)


def test_used_lie_is_ignored():
    assert evaluate_guess(2, 7, lie_requested=True, lie_available=False) == (HIGHER, False)
    assert evaluate_guess(7, 7, lie_requested=True, lie_available=False) == (CORRECT, False)


def test_settings_validation():
    with pytest.raises(InvalidSettings):
        RoomSettings(5, 5)
    with pytest.raises(InvalidSettings):
        RoomSettings(10, 1)
    with pytest.raises(InvalidSettings):
        RoomSettings('1', 10)
    with pytest.raises(InvalidSettings):
        RoomSettings(True, 10)
    assert RoomSettings(-5, 5).contains(-5)
    assert not RoomSettings(-5, 5).contains(6)


def test_status_moves_forward_through_every_state():
    room = make_room()
    seen = [room.status]
    room.seat(Player('sid-2', 'tok-2', 'Bob'))
    seen.append(room.status)
    room.pick('sid-1', 4)
    assert room.status == PICKING
    room.pick('sid-2', 7)
    seen.append(room.status)
    room.guess('sid-1', 7)
    seen.append(room.status)
    assert seen == [WAITING, PICKING, PLAYING, FINISHED]


def test_backward_or_skipping_transition_is_refused():
    room = make_room()
    with pytest.raises(InvalidTransition):
        room._advance(Playing(turn='sid-1'))
    room.seat(Player('sid-2', 'tok-2', 'Bob'))
    with pytest.raises(InvalidTransition):
        room._advance(Waiting())
    assert isinstance(room.state, Picking)


def test_seat_rejects_third_player():
    room = make_room()
    room.seat(Player('sid-2', 'tok-2', 'Bob'))
    with pytest.raises(RoomFull):
        room.seat(Player('sid-3', 'tok-3', 'Cara'))
    assert [p.display_name for p in room.players] == ['Alice', 'Bob']
    assert room.status == PICKING


def test_seat_rejects_duplicate_name_and_same_connection():
    room = make_room()
    with pytest.raises(NameTaken):
        room.seat(Player('sid-2', 'tok-2', 'Alice'))
    with pytest.raises(AlreadyInRoom):
        room.seat(Player('sid-1', 'tok-1', 'Other'))
    assert room.status == WAITING
    assert len(room.players) == 1


@pytest.mark.parametrize('number', [0, 11, -3, 100])
def test_pick_out_of_range_leaves_secret_unset(number):
    room = make_room(1, 10)
    room.seat(Player('sid-2', 'tok-2', 'Bob'))
    with pytest.raises(OutOfRange):
        room.pick('sid-1', number)
    assert room.player('sid-1').secret_number is None
    assert room.status == PICKING


def test_pick_bounds_are_inclusive():
    room = make_room(1, 10)
    room.seat(Player('sid-2', 'tok-2', 'Bob'))
    assert room.pick('sid-1', 1)
    assert room.pick('sid-2', 10)
    assert room.status == PLAYING


def test_pick_ignored_outside_picking_or_when_repeated():
    room = make_room()
    assert room.pick('sid-1', 3) is False
    assert room.player('sid-1').secret_number is None
    room.seat(Player('sid-2', 'tok-2', 'Bob'))
    assert room.pick('sid-1', 3)
    assert room.pick('sid-1', 5) is False
    assert room.player('sid-1').secret_number == 3
    assert room.pick('stranger', 5) is False


def test_first_seated_player_moves_first():
    room = playing_room()
    assert room.turn_connection_id == 'sid-1'
    assert room.winner_display_name is None


def test_guess_before_playing_is_noop():
    room = make_room()
    room.seat(Player('sid-2', 'tok-2', 'Bob'))
    room.pick('sid-1', 4)
    assert room.guess('sid-1', 4) is None
    assert room.player('sid-1').guesses == []


def test_turn_alternates_and_out_of_turn_guess_is_ignored():
    room = playing_room()
    assert room.guess('sid-2', 4) is None
    assert room.turn_connection_id == 'sid-1'
    room.guess('sid-1', 1)
    assert room.turn_connection_id == 'sid-2'
    room.guess('sid-2', 1)
    assert room.turn_connection_id == 'sid-1'


def test_scenario_a_correct_guess_finishes():
    room = playing_room(p1_secret=4, p2_secret=7)
    first = room.guess('sid-1', 9)
    assert first.feedback == LOWER
    assert room.turn_connection_id == 'sid-2'
    second = room.guess('sid-2', 4)
    assert second.feedback == CORRECT
    assert room.status == FINISHED
    assert room.winner_display_name == 'Bob'
    assert room.turn_connection_id is None
    # Terminal: nothing else is accepted
    assert room.guess('sid-1', 7) is None


def test_scenario_b_lie_is_single_use():
    room = playing_room(p1_secret=4, p2_secret=7)
    lied = room.guess('sid-1', 2, lie=True)
    assert lied.feedback == LOWER
    assert lied.was_lie is True
    assert room.player('sid-1').has_used_lie is True
    room.guess('sid-2', 1)
    again = room.guess('sid-1', 2, lie=True)
    assert again.feedback == HIGHER
    assert again.was_lie is False
    assert room.player('sid-1').has_used_lie is True


def test_lie_on_correct_guess_keeps_game_going():
    room = playing_room(p1_secret=4, p2_secret=7)
    guess = room.guess('sid-1', 7, lie=True)
    assert guess.feedback == HIGHER
    assert room.status == PLAYING
    assert room.turn_connection_id == 'sid-2'


def test_correct_guess_with_spent_lie_still_wins():
    room = playing_room(p1_secret=4, p2_secret=7)
    room.guess('sid-1', 1, lie=True)
    room.guess('sid-2', 1)
    guess = room.guess('sid-1', 7, lie=True)
    assert guess.feedback == CORRECT
    assert room.winner_display_name == 'Alice'


def test_guess_history_is_ordered():
    room = playing_room()
    room.guess('sid-1', 1)
    room.guess('sid-2', 1)
    room.guess('sid-1', 2)
    history = sorted(room.player('sid-1').guesses + room.player('sid-2').guesses, key=lambda g: g.timestamp)
    assert [(g.author_id, g.value) for g in history] == [('sid-1', 1), ('sid-2', 1), ('sid-1', 2)]
    assert [g.value for g in room.player('sid-1').guesses] == [1, 2]
