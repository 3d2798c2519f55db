"""
Subscription and referral service layer.
"""
from services.errors import NotFoundError, ValidationError
from utils.db_utils import get_db_connection, close_db_connection, fetch_one_dict, read_records
from utils.time_utils import now_ms

PLAN_IDS = ('free', 'starter', 'plus', 'plus-annual', 'pro', 'pro-annual')

WEBHOOK_FIELDS = (
    'status', 'plan_id', 'current_period_start', 'current_period_end',
    'trial_end', 'cancel_at_period_end',
)


def map_price_to_plan(price_id_or_lookup_key):
    """
    Map a Stripe price id or lookup key to a plan id.

    Annual variants are matched before their monthly names since "plus"
    is a substring of "plus_annual".

    Args:
        price_id_or_lookup_key (str): Price id or lookup key

    Returns:
        str: One of PLAN_IDS
    """
    key = (price_id_or_lookup_key or '').lower()
    if 'starter' in key:
        return 'starter'
    if 'plus_annual' in key or 'plus-annual' in key:
        return 'plus-annual'
    if 'pro_annual' in key or 'pro-annual' in key:
        return 'pro-annual'
    if 'plus' in key:
        return 'plus'
    if 'pro' in key:
        return 'pro'
    return 'free'


def normalize_status(status):
    if status in ('active', 'trialing'):
        return 'active'
    return status


def _decode(subscription):
    if subscription is not None:
        subscription['cancel_at_period_end'] = bool(subscription.get('cancel_at_period_end'))
    return subscription


def get_user_subscription(user_id, config_dict):
    """Latest subscription for the user, or None."""
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute(
            "SELECT * FROM subscriptions WHERE user_id = ? ORDER BY created_at DESC, id DESC LIMIT 1",
            (user_id,),
        )
        return _decode(fetch_one_dict(cursor))
    finally:
        close_db_connection(conn)


def get_subscription_by_stripe_id(stripe_subscription_id, config_dict):
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("SELECT * FROM subscriptions WHERE stripe_subscription_id = ?", (stripe_subscription_id,))
        return _decode(fetch_one_dict(cursor))
    finally:
        close_db_connection(conn)


def get_subscription_by_customer(stripe_customer_id, config_dict):
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute(
            "SELECT * FROM subscriptions WHERE stripe_customer_id = ? ORDER BY created_at DESC, id DESC LIMIT 1",
            (stripe_customer_id,),
        )
        return _decode(fetch_one_dict(cursor))
    finally:
        close_db_connection(conn)


def create_subscription(user_id, data, config_dict):
    """
    Insert a subscription row.

    Args:
        user_id (int): Owner
        data (dict): stripe_subscription_id, stripe_customer_id, plan_id, status,
            current_period_start, current_period_end, trial_end, cancel_at_period_end
        config_dict (dict): Configuration dictionary

    Returns:
        dict: The stored subscription
    """
    if not data.get('stripe_subscription_id'):
        raise ValidationError("stripe_subscription_id is required")
    plan_id = data.get('plan_id') or 'free'
    if plan_id not in PLAN_IDS:
        raise ValidationError(f"Invalid plan: {plan_id}")
    timestamp = now_ms()
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("""
            INSERT INTO subscriptions (user_id, stripe_subscription_id, stripe_customer_id, plan_id, status,
                                       current_period_start, current_period_end, trial_end,
                                       cancel_at_period_end, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            user_id,
            data['stripe_subscription_id'],
            data.get('stripe_customer_id'),
            plan_id,
            normalize_status(data.get('status') or 'active'),
            data.get('current_period_start'),
            data.get('current_period_end'),
            data.get('trial_end'),
            1 if data.get('cancel_at_period_end') else 0,
            timestamp,
            timestamp,
        ))
        conn.commit()
    finally:
        close_db_connection(conn)
    return get_subscription_by_stripe_id(data['stripe_subscription_id'], config_dict)


def update_subscription_from_webhook(stripe_subscription_id, data, config_dict):
    """
    Apply a Stripe subscription update.

    Args:
        stripe_subscription_id (str): Stripe subscription id
        data (dict): Any of status, plan_id, period timestamps, trial_end, cancel_at_period_end
        config_dict (dict): Configuration dictionary

    Returns:
        dict: The updated subscription

    Raises:
        NotFoundError: If no subscription has this Stripe id
    """
    existing = get_subscription_by_stripe_id(stripe_subscription_id, config_dict)
    if existing is None:
        raise NotFoundError("Subscription not found")

    updates = {field: data[field] for field in WEBHOOK_FIELDS if data.get(field) is not None}
    if 'status' in updates:
        updates['status'] = normalize_status(updates['status'])
    if 'cancel_at_period_end' in updates:
        updates['cancel_at_period_end'] = 1 if updates['cancel_at_period_end'] else 0

    assignments = ''.join(f"{field} = ?, " for field in updates)
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute(
            f"UPDATE subscriptions SET {assignments}updated_at = ? WHERE stripe_subscription_id = ?",
            list(updates.values()) + [now_ms(), stripe_subscription_id],
        )
        conn.commit()
    finally:
        close_db_connection(conn)
    return get_subscription_by_stripe_id(stripe_subscription_id, config_dict)


def upsert_subscription_with_user_id(user_id, data, config_dict):
    """Update the subscription if the Stripe id is known, otherwise create it."""
    existing = get_subscription_by_stripe_id(data.get('stripe_subscription_id'), config_dict)
    if existing is None:
        return create_subscription(user_id, data, config_dict)
    return update_subscription_from_webhook(data['stripe_subscription_id'], data, config_dict)


def cancel_subscription(user_id, config_dict):
    subscription = get_user_subscription(user_id, config_dict)
    if subscription is None:
        raise NotFoundError("Subscription not found")
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute(
            "UPDATE subscriptions SET status = 'canceled', updated_at = ? WHERE id = ?",
            (now_ms(), subscription['id']),
        )
        conn.commit()
    finally:
        close_db_connection(conn)
    return get_user_subscription(user_id, config_dict)


# Referrals

def create_referral(referrer_user_id, referred_email, config_dict):
    email = (referred_email or '').strip().lower()
    if not email:
        raise ValidationError("Referred email is required")
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("""
            INSERT INTO referrals (referrer_user_id, referred_email, status, reward_granted, created_at)
            VALUES (?, ?, 'pending', 0, ?)
        """, (referrer_user_id, email, now_ms()))
        conn.commit()
        return cursor.lastrowid
    finally:
        close_db_connection(conn)


def update_referral(referral_id, config_dict, status=None, referred_user_id=None, reward_granted=None):
    """Mark a referral converted and/or rewarded."""
    updates = {}
    if status is not None:
        if status not in ('pending', 'converted'):
            raise ValidationError(f"Invalid referral status: {status}")
        updates['status'] = status
    if referred_user_id is not None:
        updates['referred_user_id'] = referred_user_id
    if reward_granted is not None:
        updates['reward_granted'] = 1 if reward_granted else 0
    if not updates:
        return False
    assignments = ', '.join(f"{field} = ?" for field in updates)
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute(f"UPDATE referrals SET {assignments} WHERE id = ?", list(updates.values()) + [referral_id])
        conn.commit()
        if cursor.rowcount == 0:
            raise NotFoundError("Referral not found")
        return True
    finally:
        close_db_connection(conn)


def get_referrals_by_referrer(referrer_user_id, config_dict):
    conn = get_db_connection(config_dict=config_dict)
    try:
        referrals = read_records(
            conn,
            "SELECT * FROM referrals WHERE referrer_user_id = ? ORDER BY created_at DESC, id DESC",
            (referrer_user_id,),
        )
    finally:
        close_db_connection(conn)
    for referral in referrals:
        referral['reward_granted'] = bool(referral.get('reward_granted'))
    return referrals
