import requests
from flask import current_app

from scisubmit.utils.logging_utils import get_logger

logger = get_logger("mail")


def send_mail(email: str, subject: str, body: str) -> int:
    """
    Deliver one plain-text message through the JSON mail gateway.

    Returns the gateway's HTTP status, or a local stand-in: 400 when a field
    is empty, 503 when ``MAIL_API_URL``/``MAIL_API_TOKEN`` are missing and 500
    when the request itself fails. With ``MAIL_FLAG`` off nothing is sent and
    200 is returned.
    """
    if not (email and subject and body):
        logger.warning("send_mail: refusing message with empty field to=%r subject=%r", email, subject)
        return 400

    cfg = current_app.config
    if not cfg.get("MAIL_FLAG", True):
        logger.info("send_mail: delivery disabled, dropping to=%s subject=%r", email, subject)
        return 200

    url, token = cfg.get("MAIL_API_URL"), cfg.get("MAIL_API_TOKEN")
    if not (url and token):
        logger.error("send_mail: MAIL_API_URL or MAIL_API_TOKEN not configured")
        return 503

    try:
        resp = requests.post(
            url,
            json={"to": email, "subject": subject, "body": body},
            headers={"Content-Type": "application/json", "Authorization": f"Bearer {token}"},
            timeout=cfg.get("MAIL_TIMEOUT_SECONDS", 10),
        )
    except requests.RequestException as exc:
        logger.error("send_mail: gateway unreachable to=%s err=%s", email, exc, exc_info=True)
        return 500

    if 200 <= resp.status_code < 300:
        logger.info("send_mail: accepted to=%s status=%s", email, resp.status_code)
    else:
        logger.warning("send_mail: gateway rejected to=%s status=%s body=%r",
                       email, resp.status_code, (resp.text or "")[:300])
    return resp.status_code
