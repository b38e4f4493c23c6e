"""Static catalog of connection templates offered to callers."""

from conduit_core.types import ConnectionType

from .types import ConnectionDescriptor

API = ConnectionType.API
LOCAL = ConnectionType.LOCAL
DATABASE = ConnectionType.DATABASE
SOCKET_PEER = ConnectionType.SOCKET_PEER


def _template(
    id: str,
    name: str,
    description: str,
    category: str,
    type: ConnectionType,
    endpoint: str,
    auth_type: str | None,
    capabilities: tuple[str, ...],
) -> ConnectionDescriptor:
    return ConnectionDescriptor(
        id=id,
        name=name,
        type=type,
        endpoint=endpoint,
        description=description,
        category=category,
        requires_auth=auth_type is not None,
        auth_type=auth_type,
        capabilities=capabilities,
    )


CONNECTION_CATALOG: tuple[ConnectionDescriptor, ...] = (
    # Development
    _template("github", "GitHub", "Access GitHub repositories, issues, and pull requests",
              "Development", API, "https://api.github.com", "token",
              ("repository-access", "issue-management", "code-search")),
    _template("gitlab", "GitLab", "GitLab project management and code hosting",
              "Development", API, "https://gitlab.com/api/v4", "token",
              ("repository-access", "ci-cd", "issue-tracking")),
    _template("vscode", "VS Code", "VS Code editor integration",
              "Development", LOCAL, "ws://localhost:3000", None,
              ("file-editing", "project-navigation", "debugging")),
    _template("docker", "Docker", "Docker container management",
              "Development", LOCAL, "unix:///var/run/docker.sock", None,
              ("container-management", "image-building", "network-management")),
    # Communication
    _template("slack", "Slack", "Slack team communication",
              "Communication", API, "https://slack.com/api", "oauth",
              ("messaging", "channel-management", "file-sharing")),
    _template("discord", "Discord", "Discord server and messaging",
              "Communication", API, "https://discord.com/api/v10", "token",
              ("messaging", "server-management", "voice-channels")),
    _template("teams", "Microsoft Teams", "Microsoft Teams collaboration",
              "Communication", API, "https://graph.microsoft.com/v1.0", "oauth",
              ("messaging", "meetings", "file-collaboration")),
    # Productivity
    _template("notion", "Notion", "Notion workspace and database management",
              "Productivity", API, "https://api.notion.com/v1", "token",
              ("database-access", "page-creation", "content-management")),
    _template("trello", "Trello", "Trello board and card management",
              "Productivity", API, "https://api.trello.com/1", "token",
              ("board-management", "card-creation", "workflow-automation")),
    _template("asana", "Asana", "Asana project and task management",
              "Productivity", API, "https://app.asana.com/api/1.0", "token",
              ("project-management", "task-tracking", "team-collaboration")),
    # Cloud
    _template("aws", "Amazon Web Services", "AWS cloud services integration",
              "Cloud", API, "https://aws.amazon.com", "iam",
              ("ec2-management", "s3-storage", "lambda-functions")),
    _template("gcp", "Google Cloud Platform", "Google Cloud services",
              "Cloud", API, "https://cloud.google.com", "service-account",
              ("compute-engine", "cloud-storage", "ai-services")),
    _template("azure", "Microsoft Azure", "Microsoft Azure cloud platform",
              "Cloud", API, "https://management.azure.com", "service-principal",
              ("virtual-machines", "storage-accounts", "cognitive-services")),
    _template("digitalocean", "DigitalOcean", "DigitalOcean cloud infrastructure",
              "Cloud", API, "https://api.digitalocean.com/v2", "token",
              ("droplet-management", "spaces-storage", "kubernetes")),
    # Database
    _template("postgresql", "PostgreSQL", "PostgreSQL database connection",
              "Database", DATABASE, "postgresql://localhost:5432", "credentials",
              ("query-execution", "schema-management", "data-analysis")),
    _template("mysql", "MySQL", "MySQL database connection",
              "Database", DATABASE, "mysql://localhost:3306", "credentials",
              ("query-execution", "table-management", "data-import")),
    _template("mongodb", "MongoDB", "MongoDB document database",
              "Database", DATABASE, "mongodb://localhost:27017", "credentials",
              ("document-operations", "collection-management", "aggregation")),
    _template("redis", "Redis", "Redis in-memory data store",
              "Database", DATABASE, "redis://localhost:6379", None,
              ("key-value-operations", "pub-sub", "caching")),
    # AI/ML
    _template("huggingface", "Hugging Face", "Hugging Face model hub and inference",
              "AI/ML", API, "https://api-inference.huggingface.co", "token",
              ("model-inference", "dataset-access", "model-training")),
    _template("anthropic", "Anthropic Claude", "Anthropic Claude AI assistant",
              "AI/ML", API, "https://api.anthropic.com", "token",
              ("text-generation", "conversation", "analysis")),
    _template("replicate", "Replicate", "Replicate AI model hosting",
              "AI/ML", API, "https://api.replicate.com/v1", "token",
              ("model-inference", "image-generation", "video-processing")),
    # Finance / Business
    _template("stripe", "Stripe", "Stripe payment processing",
              "Finance", API, "https://api.stripe.com", "token",
              ("payment-processing", "subscription-management", "financial-reporting")),
    _template("plaid", "Plaid", "Plaid financial data API",
              "Finance", API, "https://api.plaid.com", "token",
              ("bank-account-access", "transaction-data", "financial-insights")),
    _template("salesforce", "Salesforce", "Salesforce CRM integration",
              "Business", API, "https://api.salesforce.com", "oauth",
              ("crm-management", "lead-tracking", "sales-automation")),
    # Media
    _template("youtube", "YouTube", "YouTube video and channel management",
              "Media", API, "https://www.googleapis.com/youtube/v3", "oauth",
              ("video-upload", "analytics", "channel-management")),
    _template("spotify", "Spotify", "Spotify music streaming integration",
              "Media", API, "https://api.spotify.com/v1", "oauth",
              ("playlist-management", "music-search", "playback-control")),
    _template("unsplash", "Unsplash", "Unsplash stock photo API",
              "Media", API, "https://api.unsplash.com", "token",
              ("photo-search", "image-download", "collection-access")),
    # System
    _template("filesystem", "File System", "Local file system access",
              "System", LOCAL, "local://filesystem", None,
              ("file-operations", "directory-management", "file-search")),
    _template("terminal", "Terminal", "System terminal and command execution",
              "System", LOCAL, "local://terminal", None,
              ("command-execution", "script-running", "system-monitoring")),
    _template("calendar", "System Calendar", "System calendar integration",
              "System", LOCAL, "local://calendar", None,
              ("event-management", "scheduling", "reminder-setting")),
    # Custom
    _template("custom-peer", "Custom Socket Peer", "Connect to a custom protocol server",
              "Custom", SOCKET_PEER, "ws://localhost:3001", None,
              ("custom-tools", "specialized-functions")),
)


def get_template(template_id: str) -> ConnectionDescriptor | None:
    """Look up a catalog template by id."""
    for template in CONNECTION_CATALOG:
        if template.id == template_id:
            return template
    return None
