"""Prompt templates sent to the Gemini model."""


def question_answer_prompt(role, experience, topics_to_focus, number_of_questions) -> str:
    return f"""
You are an AI trained to generate technical interview questions and answers.

Task:
- Role: {role}
- Candidate Experience: {experience} years
- Focus Topics: {topics_to_focus}
- Write {number_of_questions} interview questions.
- For each question, generate a detailed but beginner-friendly answer.
- If the answer needs a code example, add a small code block inside.
- Keep formatting very clean.

Return a pure JSON array like:
[
    {{
        "question": "Question here?",
        "answer": "Answer here."
    }},
    ...
]

Important: Do NOT add any extra text. Only return valid JSON.
"""


def concept_explain_prompt(question) -> str:
    return f"""
You are an AI trained to generate explanations for interview questions.

Task:
- Explain the following interview question and its concept in depth as if you're teaching a beginner developer.
- Question: "{question}"
- After the explanation, provide a short and clear title that summarizes the concept for the article or page header.
- If the explanation includes a code example, add a small code block inside.
- Keep the formatting very clean and clear.

Return the result as a valid JSON object in the following format:
{{
    "title": "Short title here?",
    "explanation": "Explanation here."
}}

Important: Do NOT add any extra text outside the JSON format. Only return valid JSON.
"""
