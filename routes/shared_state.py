"""
Shared state for blueprints (global variables that need to be shared).
"""
# Last template generation status per user id
generation_status = {}


def update_generation_status(user_id, message, template_type=None, completed=False, success=None):
    """Update template generation status"""
    status = generation_status.setdefault(
        user_id,
        {"running": False, "message": "", "template_type": None, "completed": False, "success": None},
    )
    status["message"] = message
    status["running"] = not completed
    status["completed"] = completed
    status["success"] = success
    if template_type:
        status["template_type"] = template_type


def get_generation_status(user_id):
    return generation_status.get(
        user_id,
        {"running": False, "message": "", "template_type": None, "completed": False, "success": None},
    )
