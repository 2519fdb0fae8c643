import json

import pytest
import requests.exceptions

import tstables.common.encryption as encryption
import tstables.common.exceptions as exceptions
import tstables.provision.provisioner as provisioner
import tstables.provision.provisioning_config as provisioning_config
from tstables.db.db_provision import DBProvision
from tstables.provision.http_provisioner import HttpProvisioner
from tstables.provision.sqlite_provisioner import SqliteProvisioner

USERS_TEAMS = {
    'teams': [
        {'name': 'broadcast', 'description': 'Broadcast engineering'},
        {'name': 'guide', 'description': 'Program guide editors'},
    ],
    'users': [
        {'username': 'alice', 'email': 'alice@example.com', 'password': 'pw1', 'teams': ['broadcast']},
        {'username': 'bob', 'email': 'bob@example.com', 'password': 'pw2', 'teams': ['broadcast', 'guide']},
    ],
}


def write_json(path, data):
    path.write_text(json.dumps(data))
    return path


def load(tmp_path, data):
    return provisioning_config.load_provisioning_config(write_json(tmp_path / 'ut.json', data))


class FakeResponse:

    def __init__(self, status_code, text=''):
        self.status_code = status_code
        self.text = text


class FakeSession:

    def __init__(self, status_code=201, error=None):
        self.headers = {}
        self.posts = []
        self.status_code = status_code
        self.error = error
        self.closed = False

    def post(self, url, json=None, timeout=None):
        if self.error is not None:
            raise self.error
        self.posts.append((url, json, timeout))
        return FakeResponse(self.status_code, 'response body')

    def close(self):
        self.closed = True


def http_config(token='secret'):
    return {'provisioning': {'url': 'https://example.com/api/', 'token': token, 'timeout': 5.0}}


def test_load_valid_config(tmp_path):
    prov_config = load(tmp_path, USERS_TEAMS)
    assert [t['name'] for t in prov_config['teams']] == ['broadcast', 'guide']
    assert prov_config['users'][1]['teams'] == ['broadcast', 'guide']


def test_missing_optional_fields_get_defaults(tmp_path):
    prov_config = load(tmp_path, {'teams': [{'name': 'a'}], 'users': [{'username': 'u'}]})
    assert prov_config['teams'][0]['description'] == ''
    assert prov_config['users'][0]['teams'] == []
    assert prov_config['users'][0]['password'] is None


@pytest.mark.parametrize('data', [
    {'teams': [{'name': 'a'}, {'name': 'a'}]},
    {'teams': [{'name': ''}]},
    {'users': [{'username': 'u'}, {'username': 'u'}]},
    {'users': [{'email': 'x@example.com'}]},
    {'teams': [{'name': 'a'}], 'users': [{'username': 'u', 'teams': ['b']}]},
    {'teams': 'a'},
    {'teams': [{'name': 'a', 'description': 7}]},
    {'users': [{'username': 'u', 'password': 12345}]},
    {'users': [{'username': 'u', 'email': 42}]},
    [],
])
def test_invalid_config(tmp_path, data):
    with pytest.raises(exceptions.ProvisioningError):
        load(tmp_path, data)


def test_missing_file(tmp_path):
    with pytest.raises(exceptions.ProvisioningError):
        provisioning_config.load_provisioning_config(tmp_path / 'none.json')


def test_invalid_json(tmp_path):
    (tmp_path / 'bad.json').write_text('{"teams": [')
    with pytest.raises(exceptions.ProvisioningError):
        provisioning_config.load_provisioning_config(tmp_path / 'bad.json')


def test_sqlite_provisioning_is_idempotent(tmp_path, config):
    prov_config = load(tmp_path, USERS_TEAMS)
    result = SqliteProvisioner(config).provision(prov_config)
    assert (result.teams, result.users) == (2, 2)
    SqliteProvisioner(config).provision(load(tmp_path, USERS_TEAMS))

    db = DBProvision(config)
    assert [t['name'] for t in db.get_teams()] == ['broadcast', 'guide']
    users = db.get_users()
    assert [u['username'] for u in users] == ['alice', 'bob']
    assert encryption.is_encrypted(users[0]['password'])
    key = encryption.set_fernet_key(config['paths']['data_dir'])
    assert encryption.decrypt(users[0]['password'], key) == 'pw1'
    members = [(m['team'], m['username']) for m in db.get_team_members()]
    assert members == [('broadcast', 'alice'), ('broadcast', 'bob'), ('guide', 'bob')]
    db.close()


def test_sqlite_membership_is_replaced(tmp_path, config):
    SqliteProvisioner(config).provision(load(tmp_path, USERS_TEAMS))
    changed = json.loads(json.dumps(USERS_TEAMS))
    changed['users'][1]['teams'] = ['guide']
    SqliteProvisioner(config).provision(load(tmp_path, changed))
    db = DBProvision(config)
    assert [m['team'] for m in db.get_team_members() if m['username'] == 'bob'] == ['guide']
    db.close()


def test_sqlite_corrupt_key_file(tmp_path, config):
    key_file = tmp_path / 'key' / 'key.txt'
    key_file.parent.mkdir()
    key_file.write_bytes(b'garbage')
    config['paths']['data_dir'] = str(key_file.parent)
    with pytest.raises(exceptions.ProvisioningError):
        SqliteProvisioner(config).provision(load(tmp_path, USERS_TEAMS))


def test_http_posts_teams_then_users(tmp_path):
    session = FakeSession()
    result = HttpProvisioner(http_config(), session).provision(load(tmp_path, USERS_TEAMS))
    assert (result.teams, result.users) == (2, 2)
    assert [p[0] for p in session.posts] == [
        'https://example.com/api/teams', 'https://example.com/api/teams',
        'https://example.com/api/users', 'https://example.com/api/users']
    assert session.posts[2][1]['username'] == 'alice'
    assert session.posts[0][2] == 5.0
    assert session.headers['Authorization'] == 'Bearer secret'
    assert session.closed


def test_http_without_token_has_no_auth_header(tmp_path):
    session = FakeSession()
    HttpProvisioner(http_config(None), session).provision(load(tmp_path, USERS_TEAMS))
    assert 'Authorization' not in session.headers


def test_http_error_status(tmp_path):
    session = FakeSession(status_code=409)
    with pytest.raises(exceptions.ProvisioningError, match='HTTP 409'):
        HttpProvisioner(http_config(), session).provision(load(tmp_path, USERS_TEAMS))
    assert len(session.posts) == 1


def test_http_connection_error(tmp_path):
    session = FakeSession(error=requests.exceptions.ConnectionError('refused'))
    with pytest.raises(exceptions.ProvisioningError):
        HttpProvisioner(http_config(), session).provision(load(tmp_path, USERS_TEAMS))


def test_http_requires_url():
    with pytest.raises(exceptions.ProvisioningError):
        HttpProvisioner({'provisioning': {'url': None, 'token': None, 'timeout': 1.0}}, FakeSession())


def test_task_returns_result(tmp_path):
    task = provisioner.ProvisionTask(HttpProvisioner(http_config(), FakeSession()),
                                     load(tmp_path, USERS_TEAMS))
    task.start()
    result = task.wait()
    assert result.users == 2
    assert 'through http' in str(result)


def test_task_reraises_error(tmp_path):
    task = provisioner.ProvisionTask(HttpProvisioner(http_config(), FakeSession(500)),
                                     load(tmp_path, USERS_TEAMS))
    task.start()
    with pytest.raises(exceptions.ProvisioningError):
        task.wait()


def test_get_provisioner_by_backend(config):
    assert isinstance(provisioner.get_provisioner(config), SqliteProvisioner)
    config['provisioning']['backend'] = 'other'
    with pytest.raises(exceptions.ProvisioningError):
        provisioner.get_provisioner(config)
