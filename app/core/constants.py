"""Application constants.

Table / RPC names and the field lists used by the interview access flow.
"""

# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------
JOB_POSTS_TABLE: str = "job_posts"
CANDIDATES_TABLE: str = "students_with_job_post"
ANSWERS_TABLE: str = "student_interview_answers"

# ---------------------------------------------------------------------------
# PL/pgSQL functions (see supabase/migrations)
# ---------------------------------------------------------------------------
COMMIT_JOIN_RPC: str = "commit_interview_join"
SUBMIT_INTERVIEW_RPC: str = "submit_interview"
SAVE_JOB_POST_RPC: str = "save_job_post"

# Embedded select pulling a job with its questions and answer points
JOB_POST_WITH_QUESTIONS_SELECT: str = (
    "*, interview_questions(*, interview_answer_points(answer_point))"
)

# Candidate with its job and the answers it submitted, each with its question
CANDIDATE_DETAIL_SELECT: str = (
    f"*, {JOB_POSTS_TABLE}(*), {ANSWERS_TABLE}(*, interview_questions(*))"
)

# Columns a candidate may fill in on the join form
PROFILE_FIELDS: tuple[str, ...] = (
    "name",
    "resume_url",
    "mobile",
    "dob",
    "highest_qualification",
    "educations",
    "location",
    "skills",
    "region",
    "residence_location",
)

# Columns returned by the roster listing
ROSTER_COLUMNS: str = "id, name, email, mobile, job_post_id, status, applied_date, created_at"
