"""
Service layer tests against a temporary SQLite database.
"""

import pytest
from unittest.mock import patch

from services.contact_service import MAX_SUBMISSIONS_PER_HOUR, add_contact
from services.document_service import (
    save_generated_cover_letter_with_file, save_generated_resume_with_file, save_resume,
)
from services.db_schema_service import verify_db_schema
from services.email_list_service import FREE_RESUME, WAITLIST, add_email, check_email
from services.errors import LimitReachedError, NotAuthorizedError, NotFoundError, ValidationError
from services.extension_service import (
    company_from_page_title, generate_api_key, get_api_key, lookup_by_key, parse_job_page, revoke_api_key,
    save_job_from_page, title_from_page_title,
)
from services.free_resume_service import check_free_resume_limit, get_stats, record_generation
from services.generation_service import check_document_limit
from services.job_service import add_job, delete_job, get_job, list_jobs, update_job
from services.performance_service import build_summary_prompt, compute_job_stats
from services.subscription_service import create_subscription, map_price_to_plan, update_subscription_from_webhook
from services.thread_service import add_message, create_thread, get_thread, list_threads, remove_thread
from services.usage_service import can_add_job, can_generate_document, get_usage_summary, job_limit_message
from services.user_service import authenticate, create_user, get_or_create_username
from utils.db_utils import close_db_connection, get_db_connection
from utils.time_utils import month_start_ms


@pytest.fixture
def db(config):
    verify_db_schema(config, verbose=False)
    return config


@pytest.fixture
def user_id(db):
    return create_user('Ada Lovelace', 'ada@example.com', 'correct-horse', db)['id']


def _subscribe(user_id, config, plan_id, status='active', stripe_id='sub_123'):
    return create_subscription(user_id, {
        'stripe_subscription_id': stripe_id,
        'stripe_customer_id': 'cus_123',
        'plan_id': plan_id,
        'status': status,
    }, config)


class TestUsers:

    def test_authenticate(self, db, user_id):
        assert authenticate('ADA@example.com', 'correct-horse', db)['id'] == user_id
        assert authenticate('ada@example.com', 'wrong-password', db) is None

    def test_duplicate_email(self, db, user_id):
        with pytest.raises(ValidationError, match='already registered'):
            create_user('Other', 'ada@example.com', 'correct-horse', db)

    def test_short_password(self, db):
        with pytest.raises(ValidationError):
            create_user('Ada', 'short@example.com', 'short', db)

    def test_username_is_derived_once(self, db, user_id):
        username = get_or_create_username(user_id, db)

        assert username
        assert get_or_create_username(user_id, db) == username


class TestJobs:

    def test_add_and_list(self, db, user_id):
        add_job(user_id, {'company': 'Acme', 'title': 'Engineer', 'skills': ['Python']}, db)
        add_job(user_id, {'company': 'Globex', 'title': 'Analyst', 'status': 'Applied'}, db)

        jobs = list_jobs(user_id, db)
        assert [job['company'] for job in jobs] == ['Globex', 'Acme']
        assert jobs[1]['status'] == 'Interested'
        assert jobs[1]['skills'] == ['Python']
        assert [job['company'] for job in list_jobs(user_id, db, status='Applied')] == ['Globex']

    def test_company_and_title_required(self, db, user_id):
        with pytest.raises(ValidationError):
            add_job(user_id, {'company': ' ', 'title': 'Engineer'}, db)

    def test_invalid_status(self, db, user_id):
        with pytest.raises(ValidationError, match='Invalid status'):
            add_job(user_id, {'company': 'Acme', 'title': 'Engineer', 'status': 'Hired'}, db)

    def test_update_and_delete(self, db, user_id):
        job = add_job(user_id, {'company': 'Acme', 'title': 'Engineer'}, db)

        updated = update_job(job['id'], user_id, {'status': 'Offered', 'interviewed': True, 'bogus': 1}, db)
        assert updated['status'] == 'Offered'
        assert updated['interviewed'] is True

        delete_job(job['id'], user_id, db)
        assert get_job(job['id'], user_id, db) is None
        with pytest.raises(NotFoundError):
            delete_job(job['id'], user_id, db)

    def test_other_users_jobs_are_off_limits(self, db, user_id):
        other_id = create_user('Grace', 'grace@example.com', 'correct-horse', db)['id']
        job = add_job(other_id, {'company': 'Acme', 'title': 'Engineer'}, db)

        with pytest.raises(NotAuthorizedError):
            get_job(job['id'], user_id, db)


class TestUsageLimits:

    def test_free_plan_job_limit(self, db, user_id):
        for i in range(10):
            add_job(user_id, {'company': f"Company {i}", 'title': 'Engineer'}, db)

        check = can_add_job(user_id, db)
        assert check['allowed'] is False
        assert check['limit'] == 10
        assert job_limit_message(check) == (
            "Your job tracker is full for your Free plan (10 jobs). "
            "Upgrade to Starter or Plus to track up to 100 jobs."
        )

    def test_inactive_subscription_falls_back_to_free(self, db, user_id):
        _subscribe(user_id, db, 'pro', status='canceled')

        check = can_add_job(user_id, db)
        assert check['plan_id'] == 'free'
        assert check['subscription_status'] == 'inactive'
        assert job_limit_message({**check, 'allowed': False}).startswith("Your subscription isn’t active")

    def test_pro_has_unlimited_jobs(self, db, user_id):
        _subscribe(user_id, db, 'pro', status='trialing')

        check = can_add_job(user_id, db)
        assert check['allowed'] is True
        assert check['limit'] is None
        assert get_usage_summary(user_id, db)['remaining']['jobs_remaining'] is None

    def test_free_plan_document_limit(self, db, user_id):
        for i in range(2):
            save_generated_resume_with_file(user_id, f"Resume {i}", b'%PDF', f"resume-{i}.pdf", {}, 'jake', db)
        save_generated_cover_letter_with_file(user_id, 'Letter', b'%PDF', 'letter.pdf', {}, 'jake', db)
        save_resume(user_id, {'name': 'Draft without a file'}, db)
        old = save_generated_resume_with_file(user_id, 'Old resume', b'%PDF', 'old.pdf', {}, 'jake', db)
        conn = get_db_connection(config_dict=db)
        try:
            conn.execute("UPDATE resumes SET created_at = ? WHERE id = ?", (month_start_ms() - 1, old['id']))
            conn.commit()
        finally:
            close_db_connection(conn)

        check = can_generate_document(user_id, db)

        assert check['allowed'] is False
        assert check['used'] == 3
        assert check['limit'] == 3
        assert check['reason'] == 'Document limit reached'
        with pytest.raises(LimitReachedError):
            check_document_limit(user_id, db)

    def test_anonymous_callers_cannot_generate(self, db):
        assert can_generate_document(None, db)['allowed'] is False

    def test_usage_summary(self, db, user_id):
        add_job(user_id, {'company': 'Acme', 'title': 'Engineer'}, db)

        summary = get_usage_summary(user_id, db)
        assert summary['limits'] == {'documents_per_month': 3, 'jobs': 10}
        assert summary['remaining'] == {'documents_remaining': 3, 'jobs_remaining': 9}
        assert summary['message'] == "Current usage: 0/3 documents this month, 1/10 jobs tracked."


class TestSubscriptions:

    @pytest.mark.parametrize('key,plan', [
        ('price_starter_monthly', 'starter'),
        ('plus_annual', 'plus-annual'),
        ('jobkompass-plus', 'plus'),
        ('pro-annual', 'pro-annual'),
        ('pro_monthly', 'pro'),
        ('price_1Nabc', 'free'),
    ])
    def test_map_price_to_plan(self, key, plan):
        assert map_price_to_plan(key) == plan

    def test_webhook_update(self, db, user_id):
        _subscribe(user_id, db, 'plus')

        updated = update_subscription_from_webhook('sub_123', {'status': 'trialing', 'cancel_at_period_end': True}, db)
        assert updated['status'] == 'active'
        assert updated['cancel_at_period_end'] in (1, True)

    def test_webhook_for_unknown_subscription(self, db):
        with pytest.raises(NotFoundError):
            update_subscription_from_webhook('sub_missing', {'status': 'active'}, db)


class TestContactAndEmailList:

    def test_contact_rate_limit(self, db):
        for _ in range(MAX_SUBMISSIONS_PER_HOUR):
            assert add_contact('Ada', 'ada@example.com', 'Hi', 'Hello there', db)['success'] is True

        result = add_contact('Ada', 'ada@example.com', 'Hi', 'Hello again', db)
        assert result == {"success": False, "message": "Too many submissions. Please try again later."}

    def test_contact_validation(self, db):
        assert add_contact('Ada', 'not-an-email', 'Hi', 'Hello', db)['message'] == 'Invalid email address'
        assert add_contact('Ada', 'ada@example.com', '', 'Hello', db)['message'] == 'Subject is required'

    def test_email_list_is_idempotent(self, db):
        first = add_email('Ada@Example.com', FREE_RESUME, db)
        second = add_email('ada@example.com', FREE_RESUME, db)

        assert first['already_existed'] is False
        assert second == {"success": True, "id": first['id'], "already_existed": True}
        assert check_email('ada@example.com', FREE_RESUME, db) == {"found": True}
        assert check_email('ada@example.com', WAITLIST, db) == {"found": False}

    def test_unknown_submission_type(self, db):
        with pytest.raises(ValidationError):
            add_email('ada@example.com', 'newsletter', db)


class TestFreeResume:

    def test_limit_per_email(self, db):
        record_generation(db, 'text', 1200, 'jake', email='ada@example.com')
        assert check_free_resume_limit('ada@example.com', db)['can_generate'] is True

        record_generation(db, 'pdf', 0, 'jake', email='ada@example.com', pdf_size_bytes=2048)
        check = check_free_resume_limit('ada@example.com', db)
        assert check == {'can_generate': False, 'count': 2, 'limit': 2, 'is_plus_or_pro': False}

    def test_paid_users_are_not_limited(self, db, user_id):
        _subscribe(user_id, db, 'plus-annual')
        for _ in range(3):
            record_generation(db, 'text', 100, 'jake', email='ada@example.com')

        check = check_free_resume_limit('ada@example.com', db)
        assert check['is_plus_or_pro'] is True
        assert check['can_generate'] is True

    def test_stats(self, db):
        assert get_stats(db)['total_generations'] == 0

        record_generation(db, 'text', 1200, 'jake', email='a@example.com')
        record_generation(db, 'pdf', 0, 'jake', email='b@example.com', pdf_size_bytes=2048)

        stats = get_stats(db)
        assert stats['total_generations'] == 2
        assert stats['total_text_input_generations'] == 1
        assert stats['total_pdf_processed'] == 1
        assert stats['total_text_characters_processed'] == 1200
        assert stats['total_pdf_bytes_processed'] == 2048
        assert stats['generations_last_7_days'] == 2


class TestThreads:

    def test_messages_update_the_thread(self, db):
        thread_id = create_thread('ada', '', db)
        add_message(thread_id, 'ada', 'user', 'Hello', db)
        add_message(thread_id, 'ada', 'assistant', 'Hi!', db, tool_calls=[{'name': 'getUserJobs'}])

        thread = get_thread(thread_id, 'ada', db)
        assert thread['thread']['title'] == 'New chat'
        assert thread['thread']['message_count'] == 2
        assert [m['content'] for m in thread['messages']] == ['Hello', 'Hi!']
        assert thread['messages'][1]['tool_calls'] == [{'name': 'getUserJobs'}]

    def test_threads_are_private(self, db):
        thread_id = create_thread('ada', 'Resume help', db)

        assert get_thread(thread_id, 'grace', db) is None
        with pytest.raises(NotAuthorizedError):
            add_message(thread_id, 'grace', 'user', 'Hello', db)

    def test_remove(self, db):
        thread_id = create_thread('ada', 'Resume help', db)
        remove_thread(thread_id, 'ada', db)

        assert list_threads('ada', db) == []


class TestExtension:

    def test_key_lifecycle(self, db, user_id):
        key = generate_api_key(user_id, db)
        assert key.startswith('jk_') and len(key) == 35
        assert lookup_by_key(key, db)['user_id'] == user_id
        assert get_api_key(user_id, db)['key'] == key[:7] + '*' * 28

        replacement = generate_api_key(user_id, db)
        assert lookup_by_key(key, db) is None
        assert lookup_by_key(replacement, db) is not None

        revoke_api_key(user_id, db)
        assert lookup_by_key(replacement, db) is None
        assert get_api_key(user_id, db) is None

    @pytest.mark.parametrize('title,company,job_title', [
        ('Senior Engineer at Acme Corp - LinkedIn', 'Acme Corp', 'Senior Engineer'),
        ('Data Analyst | Globex', 'Globex', 'Data Analyst'),
    ])
    def test_page_title_fallback(self, title, company, job_title):
        assert company_from_page_title(title) == company
        assert title_from_page_title(title) == job_title

    def test_parse_without_model(self, db):
        fields = parse_job_page(db, 'x' * 600, 'Engineer at Acme')

        assert fields['company'] == 'Acme'
        assert fields['title'] == 'Engineer'
        assert len(fields['description']) == 500
        assert fields['skills'] == []

    def test_parse_with_model(self, db):
        db['openrouter_api_key'] = 'or-test'
        reply = '{"company": "Acme", "title": "Engineer", "skills": ["a","b","c","d","e","f","g","h","i","j","k"]}'

        with patch('services.extension_service.call_openrouter', return_value=(reply, 'model')):
            fields = parse_job_page(db, 'page text', 'Listing')

        assert fields['company'] == 'Acme'
        assert len(fields['skills']) == 10

    def test_save_job_respects_the_job_limit(self, db, user_id):
        key = generate_api_key(user_id, db)
        key_id = lookup_by_key(key, db)['id']
        for i in range(10):
            add_job(user_id, {'company': f"Company {i}", 'title': 'Engineer'}, db)

        with pytest.raises(LimitReachedError):
            save_job_from_page(db, user_id, key_id, 'text', 'https://jobs.example.com/1', 'Engineer at Acme')

    def test_save_job(self, db, user_id):
        key = generate_api_key(user_id, db)
        key_id = lookup_by_key(key, db)['id']

        job = save_job_from_page(db, user_id, key_id, 'text', 'https://jobs.example.com/1', 'Engineer at Acme')
        assert job['link'] == 'https://jobs.example.com/1'
        assert job['status'] == 'Interested'


class TestPerformance:

    def test_compute_job_stats(self, db, user_id):
        add_job(user_id, {'company': 'Acme', 'title': 'Engineer', 'status': 'Offered', 'resume_used': 'Resume A'}, db)
        add_job(user_id, {'company': 'Globex', 'title': 'Engineer', 'status': 'Rejected', 'resume_used': 'Resume A'}, db)
        add_job(user_id, {'company': 'Initech', 'title': 'Engineer'}, db)

        stats = compute_job_stats(user_id, db)
        assert stats['total_jobs'] == 3
        assert stats['status_counts']['Interested'] == 1
        assert stats['resume_stats']['Resume A']['total_jobs'] == 2
        assert stats['resume_stats']['Resume A']['offered'] == 1
        assert stats['cover_letter_stats'] == {}

    def test_summary_prompt(self):
        prompt = build_summary_prompt({
            'total_jobs': 4,
            'status_counts': {'Applied': 3, 'Offered': 1},
            'resume_stats': {'Resume A': {'total_jobs': 4, 'offered': 1}},
        })

        assert 'Total Jobs: 4' in prompt
        assert '- Applied: 3' in prompt
        assert '- Ghosted: 0' in prompt
        assert 'Resume Performance:\n- Resume A: 4 jobs (1 offers' in prompt
