"""
Achievement catalogue and rewards loaded into a fresh database
"""

import logging

from sqlalchemy.orm import Session

from .models_achievement import Achievement, AchievementReward

logger = logging.getLogger(__name__)

BADGE_COLORS = {"bronze": "#CD7F32", "silver": "#C0C0C0", "gold": "#FFD700"}

# (code, name, description, category, points, icon, required_count, level)
ACHIEVEMENTS = [
    # Clients
    ("first_client", "First Client", "You added your first client to the system", "client", 10, "UserPlus", 1, "bronze"),
    ("client_master", "Client Master", "You manage 10 active clients in the system", "client", 50, "Users", 10, "silver"),
    ("client_empire", "Client Empire", "Your network has grown to 25 clients", "client", 100, "Building", 25, "gold"),
    # Projects
    ("first_project", "First Project", "You created your first project", "project", 15, "Hammer", 1, "bronze"),
    ("project_master", "Project Master", "You have successfully completed 5 projects", "project", 75, "Trophy", 5, "silver"),
    ("project_variety", "Project Variety", "You have worked on 3 different types of services", "project", 60, "Layers", 3, "silver"),
    # Estimates
    ("first_estimate", "First Estimate", "You created your first estimate for a client", "estimate", 15, "Calculator", 1, "bronze"),
    ("estimate_accepted", "Proposal Accepted", "A client has accepted your estimate", "estimate", 25, "CheckCircle", 1, "bronze"),
    ("estimate_master", "Expert Estimator", "You have converted 10 estimates into invoices", "estimate", 100, "TrendingUp", 10, "gold"),
    # Invoices
    ("first_invoice", "First Invoice", "You created your first invoice in the system", "invoice", 15, "FileText", 1, "bronze"),
    ("invoice_paid", "First Payment", "You received payment for your first invoice", "invoice", 20, "DollarSign", 1, "bronze"),
    ("invoice_master", "Financial Master", "You have received payments for 10 invoices", "invoice", 75, "TrendingUp", 10, "silver"),
    # System usage
    ("streak_week", "Weekly Consistency", "You have logged in for 7 consecutive days", "system", 30, "Calendar", 7, "bronze"),
    ("streak_month", "Monthly Consistency", "You have maintained a streak of 30 consecutive days", "system", 100, "Award", 30, "gold"),
    ("feature_explorer", "Feature Explorer", "You have used all the main features", "system", 50, "Compass", 1, "silver"),
    # AI
    ("ai_assistant", "AI Assistant", "You have used your first AI analysis for a project", "ai", 20, "Brain", 1, "bronze"),
    ("ai_master", "AI Master", "You have used AI to analyze 10 projects", "ai", 75, "Cpu", 10, "silver"),
]

# (achievement code, type, description, value, duration in days)
REWARDS = [
    ("client_empire", "feature", "Access to advanced client analytics tools", "advanced_client_analytics", None),
    ("estimate_master", "feature", "Access to premium estimate templates", "premium_estimate_templates", None),
    ("invoice_master", "discount", "10% discount on your plan for 3 months", "10", 90),
    ("streak_month", "feature", "Dark mode unlocked", "dark_mode", None),
    ("ai_master", "credit", "50 additional credits for AI analysis", "50", None),
]


def seed_achievements(db: Session) -> int:
    """Insert missing achievements and rewards. Returns the number of achievements added."""
    existing = {code for (code,) in db.query(Achievement.code).all()}
    added = 0

    for code, name, description, category, points, icon, required_count, level in ACHIEVEMENTS:
        if code in existing:
            continue
        db.add(
            Achievement(
                code=code,
                name=name,
                description=description,
                category=category,
                points=points,
                icon=icon,
                required_count=required_count,
                level=level,
                badge_color=BADGE_COLORS[level],
            )
        )
        added += 1
    db.flush()

    by_code = {a.code: a for a in db.query(Achievement).all()}
    for code, reward_type, description, value, duration in REWARDS:
        achievement = by_code.get(code)
        if achievement is None or achievement.reward is not None:
            continue
        db.add(
            AchievementReward(
                achievement_id=achievement.id,
                type=reward_type,
                description=description,
                value=value,
                duration=duration,
            )
        )

    db.commit()
    if added:
        logger.info(f"✅ Seeded {added} achievements")
    return added
