"""
Stripe billing routes blueprint: checkout, customer portal and webhook.
"""
import logging

import stripe
from flask import Blueprint, jsonify, request, current_app, g
from services.subscription_service import (
    get_user_subscription,
    map_price_to_plan,
    normalize_status,
    update_subscription_from_webhook,
    upsert_subscription_with_user_id,
)
from utils.auth_utils import login_required

logger = logging.getLogger(__name__)

# Create blueprint
stripe_bp = Blueprint('stripe', __name__)


def _field(obj, key):
    """Read a Stripe object or dict field, None when absent."""
    try:
        return obj[key]
    except (KeyError, TypeError):
        return None


def _seconds_to_ms(value):
    return value * 1000 if value else None


def subscription_fields(subscription):
    """
    Subscription columns from a Stripe subscription object.

    Newer Stripe API versions report the billing period on the subscription
    item instead of the subscription.
    """
    items = _field(_field(subscription, 'items'), 'data') or []
    first_item = items[0] if items else None
    price = _field(first_item, 'price')
    period_source = subscription if _field(subscription, 'current_period_start') else first_item
    return {
        'stripe_subscription_id': _field(subscription, 'id'),
        'stripe_customer_id': _field(subscription, 'customer'),
        'status': normalize_status(_field(subscription, 'status')),
        'plan_id': map_price_to_plan(_field(price, 'lookup_key') or _field(price, 'id') or ''),
        'current_period_start': _seconds_to_ms(_field(period_source, 'current_period_start')),
        'current_period_end': _seconds_to_ms(_field(period_source, 'current_period_end')),
        'trial_end': _seconds_to_ms(_field(subscription, 'trial_end')),
        'cancel_at_period_end': bool(_field(subscription, 'cancel_at_period_end')),
    }


@stripe_bp.route('/api/stripe/checkout', methods=['POST'])
@login_required
def create_checkout_session():
    """Create a Stripe Checkout session for a price"""
    config = current_app.config['CONFIG']
    api_key = config['stripe_secret_key']
    data = request.get_json(silent=True) or {}
    price_id = data.get('price_id')
    if not price_id:
        return jsonify({"error": "Price ID is required"}), 400

    user_id = str(g.user['id'])
    try:
        customer_id = data.get('customer_id')
        if not customer_id:
            email = data.get('email') or g.user.get('email')
            if not email:
                return jsonify({"error": "Email or customer ID required"}), 400
            existing = stripe.Customer.list(email=email, limit=1, api_key=api_key)
            if existing.data:
                customer_id = existing.data[0].id
            else:
                customer_id = stripe.Customer.create(
                    email=email, metadata={"userId": user_id}, api_key=api_key,
                ).id

        price = stripe.Price.retrieve(price_id, api_key=api_key)
        is_recurring = _field(price, 'type') == 'recurring'

        params = {
            'customer': customer_id,
            'payment_method_types': ['card'],
            'line_items': [{'price': price_id, 'quantity': 1}],
            'mode': 'subscription' if is_recurring else 'payment',
            'success_url': f"{config['app_url']}/stripe/success?session_id={{CHECKOUT_SESSION_ID}}",
            'cancel_url': f"{config['app_url']}/pricing",
            'metadata': {'userId': user_id},
        }
        if is_recurring:
            params['subscription_data'] = {'metadata': {'userId': user_id}}
        session = stripe.checkout.Session.create(api_key=api_key, **params)
        return jsonify({"checkout_url": session.url, "session_id": session.id})
    except stripe.StripeError as e:
        logger.error(f"Stripe checkout error: {e}")
        return jsonify({"error": str(e) or "Failed to create checkout session"}), 500


@stripe_bp.route('/api/stripe/portal', methods=['POST'])
@login_required
def create_portal_session():
    """Create a Stripe customer portal session"""
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    customer_id = data.get('customer_id')
    if not customer_id:
        subscription = get_user_subscription(g.user['id'], config)
        customer_id = subscription.get('stripe_customer_id') if subscription else None
    if not customer_id:
        return jsonify({"error": "Customer ID is required"}), 400

    try:
        session = stripe.billing_portal.Session.create(
            customer=customer_id,
            return_url=f"{config['app_url']}/app",
            api_key=config['stripe_secret_key'],
        )
        return jsonify({"url": session.url})
    except stripe.StripeError as e:
        logger.error(f"Stripe portal error: {e}")
        return jsonify({"error": str(e) or "Failed to create portal session"}), 500


@stripe_bp.route('/api/stripe/webhook', methods=['POST'])
def webhook():
    """Apply Stripe subscription events"""
    config = current_app.config['CONFIG']
    payload = request.get_data()
    signature = request.headers.get('Stripe-Signature')
    if not signature:
        return jsonify({"error": "No signature"}), 400

    try:
        event = stripe.Webhook.construct_event(payload, signature, config['stripe_webhook_secret'])
    except (ValueError, stripe.SignatureVerificationError) as e:
        logger.error(f"Webhook signature verification failed: {e}")
        return jsonify({"error": str(e)}), 400

    event_type = event['type']
    try:
        if event_type == 'checkout.session.completed':
            session = event['data']['object']
            metadata = _field(session, 'metadata') or {}
            if _field(session, 'mode') == 'subscription' and _field(session, 'subscription'):
                subscription = stripe.Subscription.retrieve(
                    _field(session, 'subscription'), api_key=config['stripe_secret_key'],
                )
                user_id = int(_field(metadata, 'userId'))
                upsert_subscription_with_user_id(user_id, subscription_fields(subscription), config)
                logger.info(f"Subscription {_field(subscription, 'id')} activated for user {user_id}")
        elif event_type in ('customer.subscription.updated', 'customer.subscription.deleted'):
            subscription = event['data']['object']
            fields = subscription_fields(subscription)
            update_subscription_from_webhook(fields['stripe_subscription_id'], fields, config)
        else:
            logger.info(f"Unhandled event type: {event_type}")
        return jsonify({"received": True})
    except Exception as e:
        logger.error(f"Webhook processing error: {e}")
        return jsonify({"error": str(e)}), 500
