"""Backend paths, which double as request-cache keys."""

AUTH_LOGIN = "/api/auth/login"
AUTH_SIGNUP = "/api/auth/signup"
USER_PREFERENCES = "/api/user-preferences"
USER_PROFILE = "/api/user/profile"
USER_PROFILE_AI = "/api/user/profile/ai"
JOB_URLS = "/api/job-urls"
APPLICATIONS = "/api/applications"
STATS = "/api/stats"
JOBS_DISCOVER = "/api/jobs/discover"
UPLOAD_PRESIGN = "/api/upload/presign"
UPLOAD_CONFIRM = "/api/upload/confirm"
UPLOAD_PROXY = "/api/upload/proxy"


def job_url_path(job_url_id: str) -> str:
    return f"{JOB_URLS}/{job_url_id}"
