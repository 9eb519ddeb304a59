"""Document store collection names.

Collections are created on first write, so these constants are the single
source of truth for the "schema".
"""

USERS = "users"
ADMINS = "admins"
TOOL_USAGE = "toolUsage"
BLOG_POSTS = "blog_posts"
AI_TOOLS = "ai_tools"
CONTACT_MESSAGES = "contact_messages"
ADMIN_NOTIFICATIONS = "admin_notifications"
SITE_SETTINGS = "site_settings"
WEBSITE_CONTENT = "website_content"
SECURITY_EVENTS = "security_events"

# Object storage namespaces
BLOG_IMAGES_PREFIX = "blog-images"
