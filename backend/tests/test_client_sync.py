import pytest

from bingo.client import ClientSyncEngine

from conftest import NAMESPACE


def make_api(client):
    def call(method, path, body=None):
        return client.open(f'/api{path}', method=method, json=body).get_json()
    return call


class Player:
    """A client engine wired to the Flask test client and its own socket."""

    def __init__(self, client, sio, user_id):
        self.sio = sio
        self.engine = ClientSyncEngine(
            make_api(client),
            lambda event, data=None: sio.emit(event, data or {}, namespace=NAMESPACE),
            user_id=user_id,
        )

    def sync(self):
        self.engine.pump(self.sio.get_received(NAMESPACE))
        return self.engine


@pytest.fixture()
def players(client, sio_factory):
    alice = Player(client, sio_factory(), 'u-alice')
    bob = Player(client, sio_factory(), 'u-bob')
    assert alice.engine.create_room('Alice') is True
    assert bob.engine.join_room(alice.engine.room_code.lower(), 'Bob') is True
    alice.sync()
    bob.sync()
    return alice, bob


def marked_labels(engine):
    return sorted(cell.label for row in engine.card.cells for cell in row if cell.marked)


def test_create_and_join_mirror_lobby(players):
    alice, bob = players
    assert alice.engine.phase == 'lobby' and bob.engine.phase == 'lobby'
    assert alice.engine.is_admin is True and bob.engine.is_admin is False
    assert bob.engine.room_code == alice.engine.room_code
    # Bob's arrival refreshed Alice's player list
    assert [p['displayName'] for p in alice.engine.players] == ['Alice', 'Bob']
    assert 'Bob joined the game' in alice.engine.notices


def test_start_then_draw_marks_only_drawn_label(players, force_draw):
    alice, bob = players
    assert alice.engine.start_game() is True
    bob.sync()
    alice.sync()
    assert bob.engine.phase == 'game' and bob.engine.card is not None

    force_draw('Delta')
    assert alice.engine.draw() is True
    for player in (alice, bob):
        engine = player.sync()
        assert [d.name for d in engine.drawn] == ['Delta']
        assert marked_labels(engine) == ['Delta']
        view = engine.render()
        assert view['currentAirline'] == 'Delta'
        assert view['drawn'] == [{'order': 1, 'name': 'Delta'}]
        assert view['canClaim'] is False


def test_bingo_flag_is_recomputed_locally(players, force_draw):
    alice, bob = players
    alice.engine.start_game()
    alice.sync()
    bob.sync()
    row = [cell.label for cell in bob.engine.card.cells[1]]
    for name in row[:4]:
        force_draw(name)
        alice.engine.draw()
    bob.sync()
    assert bob.engine.has_bingo is False
    # A push never sets the flag directly
    bob.engine.handle_event('bingo-winner', {'winnerId': 'u-alice', 'winnerName': 'Alice'})
    assert bob.engine.has_bingo is False
    bob.engine.game_status = 'STARTED'
    bob.engine.winner = None

    force_draw(row[4])
    alice.engine.draw()
    bob.sync()
    assert bob.engine.has_bingo is True
    view = bob.engine.render()
    assert view['canClaim'] is True
    assert all(cell['winning'] for cell in view['grid'][1])


def test_duplicate_draw_push_is_ignored(players, force_draw):
    alice, bob = players
    alice.engine.start_game()
    bob.sync()
    force_draw('KLM')
    alice.engine.draw()
    packets = bob.sio.get_received(NAMESPACE)
    bob.engine.pump(packets)
    bob.engine.pump(packets)
    assert [d.order for d in bob.engine.drawn] == [1]


def test_claim_protocol_and_winner(players, force_draw):
    alice, bob = players
    alice.engine.start_game()
    alice.sync()
    bob.sync()

    # Nothing drawn yet: the notice goes out but the claim is rejected
    assert bob.engine.claim_bingo() is False
    alice.sync()
    assert 'Bob is claiming BINGO!' in alice.engine.notices
    assert alice.engine.winner is None

    for cell in bob.engine.card.cells[0]:
        force_draw(cell.label)
        alice.engine.draw()
    bob.sync()
    assert bob.engine.claim_bingo() is True
    for player in (alice, bob):
        player.sync()
    assert bob.engine.render()['winner'] == {'name': 'Bob', 'isMe': True}
    assert alice.engine.render()['winner'] == {'name': 'Bob', 'isMe': False}
    assert alice.engine.game_status == 'FINISHED'
    assert bob.engine.can_claim is False


def test_reset_clears_every_mirror(players, force_draw):
    alice, bob = players
    alice.engine.start_game()
    alice.sync()
    bob.sync()
    for cell in alice.engine.card.cells[3]:
        force_draw(cell.label)
        alice.engine.draw()
    alice.sync()
    alice.engine.claim_bingo()
    alice.sync()
    bob.sync()
    assert bob.engine.game_status == 'FINISHED'

    assert alice.engine.reset_game() is True
    for player in (alice, bob):
        engine = player.sync()
        assert engine.game_status == 'WAITING'
        assert engine.phase == 'lobby'
        assert engine.drawn == []
        assert engine.card is None
        assert engine.winner is None
        assert engine.has_bingo is False


def test_kicked_player_returns_to_landing(players, registry):
    alice, bob = players
    code = alice.engine.room_code
    assert alice.engine.kick('u-bob') is True
    bob.sync()
    alice.sync()
    assert bob.engine.phase == 'landing'
    assert bob.engine.room_code is None
    assert 'You have been removed from the game' in bob.engine.notices
    assert [p['userId'] for p in alice.engine.players] == ['u-alice']
    assert [p.user_id for p in registry.list_participants(code)] == ['u-alice']


def test_join_validation_happens_locally(client, sio_factory):
    player = Player(client, sio_factory(), 'u-x')
    assert player.engine.join_room('abc', 'Xavier') is False
    assert player.engine.last_error == 'Please enter a valid 6-character code'
    assert player.engine.create_room('  ') is False
    assert player.engine.last_error == 'Please enter your name'
    assert player.engine.join_room('ZZZZZZ', 'Xavier') is False
    assert player.engine.last_error == 'Room not found'
    assert player.engine.phase == 'landing'


def test_late_joiner_loads_card_and_draws(players, client, sio_factory, force_draw):
    alice, bob = players
    alice.engine.start_game()
    force_draw('Emirates')
    alice.engine.draw()
    cara = Player(client, sio_factory(), 'u-cara')
    assert cara.engine.join_room(alice.engine.room_code, 'Cara') is True
    assert cara.engine.phase == 'game'
    assert [d.name for d in cara.engine.drawn] == ['Emirates']
    assert marked_labels(cara.engine) == ['Emirates']


def test_code_length_follows_server_setting(flask_app):
    calls = []

    def api(method, path, body=None):
        calls.append((method, path))
        return {'success': False, 'error': 'Room not found'}

    length = flask_app.config['ROOM_CODE_LENGTH']
    engine = ClientSyncEngine(api, lambda event, data=None: None, room_code_length=length + 2)
    assert engine.join_room('A' * length, 'Xavier') is False
    assert engine.last_error == f'Please enter a valid {length + 2}-character code'
    assert calls == []

    assert engine.join_room('A' * (length + 2), 'Xavier') is False
    assert calls == [('GET', f"/rooms/{'A' * (length + 2)}")]
