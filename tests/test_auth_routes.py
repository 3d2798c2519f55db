"""
Tests for authentication, profile and config endpoints.
"""


class TestAuth:

    def test_signup_returns_user_and_token(self, client):
        response = client.post('/api/auth/signup', json={
            'name': 'Ada Lovelace', 'email': 'Ada@Example.com', 'password': 'correct-horse',
        })

        assert response.status_code == 201
        data = response.get_json()
        assert data['user']['email'] == 'ada@example.com'
        assert 'password_hash' not in data['user']
        assert data['token']

    def test_signup_rejects_duplicates(self, client, signup):
        signup()

        response = client.post('/api/auth/signup', json={
            'name': 'Ada', 'email': 'ada@example.com', 'password': 'correct-horse',
        })

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Email already registered'

    def test_signin(self, client, signup):
        signup()

        response = client.post('/api/auth/signin', json={'email': 'ada@example.com', 'password': 'correct-horse'})
        assert response.status_code == 200
        assert response.get_json()['user']['name'] == 'Ada Lovelace'

        response = client.post('/api/auth/signin', json={'email': 'ada@example.com', 'password': 'nope'})
        assert response.status_code == 401
        assert response.get_json()['error'] == 'Invalid email or password'

    def test_me_requires_a_session(self, client):
        response = client.get('/api/auth/me')

        assert response.status_code == 401
        assert response.get_json()['error'] == 'Not authenticated'

    def test_signout_ends_the_session(self, client, auth_headers):
        assert client.get('/api/auth/me', headers=auth_headers).status_code == 200

        client.post('/api/auth/signout', headers=auth_headers)

        assert client.get('/api/auth/me', headers=auth_headers).status_code == 401

    def test_resume_preferences(self, client, auth_headers):
        response = client.get('/api/auth/me/resume-preferences', headers=auth_headers)
        assert response.get_json() == {'preferences': []}

        client.put('/api/auth/me/resume-preferences', headers=auth_headers,
                   json={'preferences': ['One page only', 'No photo']})

        response = client.get('/api/auth/me/resume-preferences', headers=auth_headers)
        assert response.get_json() == {'preferences': ['One page only', 'No photo']}


class TestConfig:

    def test_secrets_are_not_exposed(self, client):
        response = client.get('/api/config')

        assert response.status_code == 200
        data = response.get_json()
        assert 'openai_api_key' not in data['config']
        assert 'db_path' not in data['config']
        assert data['models']['chat'] == 'gpt-5-mini'
        assert data['templates']['free_resume'] == ['jake']
