"""
Tests for the job tracker endpoints.
"""

import pytest
from unittest.mock import MagicMock, patch

from agent.runner import RunResult


def _extraction(*results, final_output='Done.'):
    calls = [{'name': 'addJobToTracker', 'arguments': {}, 'result': result} for result in results]
    return RunResult(final_output=final_output, tool_calls=calls, agent_name='JobExtractor')


class TestJobCrud:

    def test_create_and_list(self, client, auth_headers):
        response = client.post('/api/jobs', headers=auth_headers, json={'company': 'Acme', 'title': 'Engineer'})
        assert response.status_code == 201
        job = response.get_json()
        assert job['status'] == 'Interested'

        client.post('/api/jobs', headers=auth_headers,
                    json={'company': 'Globex', 'title': 'Analyst', 'status': 'Applied'})

        assert len(client.get('/api/jobs', headers=auth_headers).get_json()) == 2
        applied = client.get('/api/jobs?status=Applied', headers=auth_headers).get_json()
        assert [j['company'] for j in applied] == ['Globex']

    def test_missing_fields(self, client, auth_headers):
        response = client.post('/api/jobs', headers=auth_headers, json={'company': 'Acme'})

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Company and title are required'

    def test_update_and_delete(self, client, auth_headers):
        job_id = client.post('/api/jobs', headers=auth_headers,
                             json={'company': 'Acme', 'title': 'Engineer'}).get_json()['id']

        response = client.put(f"/api/jobs/{job_id}", headers=auth_headers, json={'status': 'Interviewing'})
        assert response.status_code == 200
        assert response.get_json()['status'] == 'Interviewing'

        assert client.delete(f"/api/jobs/{job_id}", headers=auth_headers).status_code == 200
        assert client.get(f"/api/jobs/{job_id}", headers=auth_headers).status_code == 404

    @pytest.mark.parametrize('changes', [{'company': ''}, {'company': '   '}, {'title': None}])
    def test_update_keeps_company_and_title(self, client, auth_headers, changes):
        job_id = client.post('/api/jobs', headers=auth_headers,
                             json={'company': 'Acme', 'title': 'Engineer'}).get_json()['id']

        response = client.put(f"/api/jobs/{job_id}", headers=auth_headers, json=changes)

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Company and title are required'
        job = client.get(f"/api/jobs/{job_id}", headers=auth_headers).get_json()
        assert (job['company'], job['title']) == ('Acme', 'Engineer')

    def test_update_trims_company(self, client, auth_headers):
        job_id = client.post('/api/jobs', headers=auth_headers,
                             json={'company': 'Acme', 'title': 'Engineer'}).get_json()['id']

        response = client.put(f"/api/jobs/{job_id}", headers=auth_headers, json={'company': '  Globex '})

        assert response.get_json()['company'] == 'Globex'

    def test_single_keyword_string(self, client, auth_headers):
        response = client.post('/api/jobs', headers=auth_headers,
                               json={'company': 'Acme', 'title': 'Engineer', 'keywords': 'python'})

        assert response.status_code == 201
        job = response.get_json()
        assert job['keywords'] == ['python']
        assert job['skills'] == []

        response = client.put(f"/api/jobs/{job['id']}", headers=auth_headers, json={'skills': 'SQL'})
        assert response.get_json()['skills'] == ['SQL']

    @pytest.mark.parametrize('keywords', [42, {'a': 1}, ['python', 3]])
    def test_keywords_must_be_strings(self, client, auth_headers, keywords):
        response = client.post('/api/jobs', headers=auth_headers,
                               json={'company': 'Acme', 'title': 'Engineer', 'keywords': keywords})

        assert response.status_code == 400
        assert response.get_json()['error'] == 'keywords must be a list of strings'

    def test_jobs_are_private(self, client, signup):
        _, owner_headers = signup('owner@example.com')
        _, other_headers = signup('other@example.com')
        job_id = client.post('/api/jobs', headers=owner_headers,
                             json={'company': 'Acme', 'title': 'Engineer'}).get_json()['id']

        assert client.get(f"/api/jobs/{job_id}", headers=other_headers).status_code == 403
        assert client.get('/api/jobs', headers=other_headers).get_json() == []

    def test_job_limit(self, client, auth_headers):
        for i in range(10):
            client.post('/api/jobs', headers=auth_headers, json={'company': f"Company {i}", 'title': 'Engineer'})

        response = client.post('/api/jobs', headers=auth_headers, json={'company': 'One more', 'title': 'Engineer'})

        assert response.status_code == 403
        data = response.get_json()
        assert data['error'] == 'Job limit reached'
        assert data['limitReached'] is True

    def test_export_csv(self, client, auth_headers):
        client.post('/api/jobs', headers=auth_headers,
                    json={'company': 'Acme', 'title': 'Engineer', 'notes': 'Referral from Bob'})

        response = client.get('/api/jobs/export', headers=auth_headers)

        assert response.status_code == 200
        assert response.mimetype == 'text/csv'
        assert 'jobs_export.csv' in response.headers['Content-Disposition']
        lines = response.get_data(as_text=True).splitlines()
        assert lines[0].startswith('Company,Title,Status')
        assert lines[1].startswith('Acme,Engineer,Interested')


class TestAddJobsFromText:

    @pytest.fixture(autouse=True)
    def openai_client(self):
        with patch('routes.job_routes.get_openai_client', return_value=MagicMock()):
            yield

    def test_requires_job_information(self, client, auth_headers):
        response = client.post('/api/jobs/add', headers=auth_headers, json={'job_information': '  '})

        assert response.status_code == 400

    def test_single_job(self, client, auth_headers):
        with patch('routes.job_routes.run_job_extractor',
                   return_value=_extraction({'success': True, 'jobId': 1})):
            response = client.post('/api/jobs/add', headers=auth_headers, json={'job_information': 'Engineer at Acme'})

        assert response.status_code == 200
        data = response.get_json()
        assert data['message'] == 'Job added successfully!'
        assert data['jobs_added'] == 1
        assert data['failed_jobs'] == 0

    def test_partial_success(self, client, auth_headers):
        with patch('routes.job_routes.run_job_extractor', return_value=_extraction(
            {'success': True, 'jobId': 1},
            {'success': True, 'jobId': 2},
            {'success': False, 'message': 'Failed to add the job.'},
        )):
            response = client.post('/api/jobs/add', headers=auth_headers, json={'job_information': 'Three jobs'})

        data = response.get_json()
        assert data['message'] == '2 jobs added successfully!'
        assert data['failed_jobs'] == 1

    def test_nothing_extracted(self, client, auth_headers):
        with patch('routes.job_routes.run_job_extractor', return_value=_extraction(final_output='Which job?')):
            response = client.post('/api/jobs/add', headers=auth_headers, json={'job_information': 'hello'})

        assert response.status_code == 400
        data = response.get_json()
        assert data['error'].startswith('No jobs were extracted')
        assert data['agent_response'] == 'Which job?'

    def test_all_failed(self, client, auth_headers):
        with patch('routes.job_routes.run_job_extractor', return_value=_extraction(
            {'success': False, 'message': 'Your job tracker is full.', 'limitReached': True},
        )):
            response = client.post('/api/jobs/add', headers=auth_headers, json={'job_information': 'Engineer'})

        assert response.status_code == 400
        data = response.get_json()
        assert data['error'] == 'Your job tracker is full.'
        assert data['limitReached'] is True
