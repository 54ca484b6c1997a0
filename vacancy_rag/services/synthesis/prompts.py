"""Prompt templates for the position synthesis step."""

SUMMARY_SYSTEM_PROMPT = "You are a helpful assistant."

# The document text is injected at {text}.
SUMMARY_USER_PROMPT = """\
You are an HR assistant. Summarise the following position-related document \
for display on a careers page. Keep it concise (max 120 words) and engaging.

Content:
\"\"\"{text}\"\"\""""

QUESTIONS_SYSTEM_PROMPT = "You are an expert technical recruiter. Reply ONLY with valid JSON."

QUESTIONS_USER_PROMPT = """\
You are an expert technical recruiter. Based on the following position \
document, extract core responsibilities, requirements, and competencies. \
Then generate 10 structured interview questions that will help assess if a \
candidate is a good fit for this role.

Content:
\"\"\"{text}\"\"\"

Return a JSON object of the form {{"questions": [...]}} holding exactly 10 \
questions. Each question must have this structure:
{{
  "id": "q1",
  "question": "The full text of the interview question",
  "type": "technical" | "behavioral" | "scenario" | "motivation",
  "skill": "The primary skill or competency being assessed"
}}
Question ids run from q1 to q10."""
