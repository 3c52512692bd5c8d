from bowlingclub.services.tokens import issue_token


def test_connect_requires_valid_token(ws_client):
    assert not ws_client('garbage').is_connected('/ws')
    assert not ws_client().is_connected('/ws')


def test_connect_and_ping(ws_client, make_user):
    user = make_user()
    sio = ws_client(issue_token(user.id, user.email))
    assert sio.is_connected('/ws')
    received = sio.get_received('/ws')
    assert any(pkt['name'] == 'connected' for pkt in received)

    sio.emit('ping', {'n': 1}, namespace='/ws')
    received = sio.get_received('/ws')
    assert any(pkt['name'] == 'pong' and pkt['args'][0] == {'n': 1} for pkt in received)


def test_non_member_cannot_join_club_room(ws_client, make_user, make_club):
    club = make_club(members=[make_user()])
    outsider = make_user()
    sio = ws_client(issue_token(outsider.id, outsider.email))
    sio.get_received('/ws')
    sio.emit('join_club', {'club_id': club.id}, namespace='/ws')
    names = [pkt['name'] for pkt in sio.get_received('/ws')]
    assert 'error' in names
    assert 'joined' not in names


def test_member_receives_club_activity(client, ws_client, make_user, make_club, make_game, auth_headers):
    watcher = make_user(name='Watcher')
    bowler = make_user(name='Bowler')
    club = make_club(members=[watcher, bowler])
    game = make_game(club)

    sio = ws_client(issue_token(watcher.id, watcher.email))
    sio.emit('join_club', {'club_id': club.id}, namespace='/ws')
    assert any(pkt['name'] == 'joined' for pkt in sio.get_received('/ws'))

    res = client.post('/api/games/scores', headers=auth_headers(bowler),
                      json={'gameId': game.id, 'score': 279, 'gameOrder': 1})
    assert res.status_code == 201

    events = [pkt for pkt in sio.get_received('/ws') if pkt['name'] == 'club_activity']
    assert len(events) == 1
    activity = events[0]['args'][0]
    assert activity['type'] == 'game'
    assert activity['clubId'] == club.id
    assert 'Bowler' in activity['title'] and '279' in activity['title']


def test_practice_scores_are_not_broadcast(client, ws_client, make_user, auth_headers):
    alice = make_user(name='Alice')
    bob = make_user(name='Bob')
    res = client.post('/api/dashboard/game', headers=auth_headers(alice), json={'score': 120})
    practice_club_id = res.get_json()['data']['game']['clubId']

    sio = ws_client(issue_token(alice.id, alice.email))
    sio.emit('join_club', {'club_id': practice_club_id}, namespace='/ws')
    sio.get_received('/ws')

    res = client.post('/api/dashboard/game', headers=auth_headers(bob), json={'score': 250})
    assert res.status_code == 201
    assert res.get_json()['data']['game']['clubId'] == practice_club_id
    assert not [pkt for pkt in sio.get_received('/ws') if pkt['name'] == 'club_activity']
