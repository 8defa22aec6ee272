from __future__ import annotations

from typing import Literal, Optional, Union

from medaieval.models import Difficulty, GeneratedQuestion, StoredQuestion

PromptFamily = Literal["detailed", "compact"]
QuestionLike = Union[GeneratedQuestion, StoredQuestion]

DEFAULT_TARGET_YEAR = "Early Clinical (Year 3-4)"

TARGET_YEARS: dict[str, str] = {
    Difficulty.foundation.value: "Pre-clinical (Year 1-2)",
    Difficulty.intermediate.value: DEFAULT_TARGET_YEAR,
    Difficulty.advanced.value: "Final Year (Year 5-6)",
    Difficulty.ukmla.value: "Final Year (Year 5-6)",
}

FOCUS: dict[str, str] = {
    Difficulty.foundation.value: "basic pathophysiology and mechanisms",
    Difficulty.intermediate.value: "common presentations and typical management",
}
DEFAULT_FOCUS = "complex scenarios and nuanced decision-making"


def _difficulty_key(difficulty: Union[str, Difficulty]) -> str:
    return difficulty.value if isinstance(difficulty, Difficulty) else str(difficulty)


def target_year_for(difficulty: Union[str, Difficulty]) -> str:
    """Map a difficulty to the student year band; unknown values get the early-clinical band."""
    return TARGET_YEARS.get(_difficulty_key(difficulty), DEFAULT_TARGET_YEAR)


def focus_for(difficulty: Union[str, Difficulty]) -> str:
    return FOCUS.get(_difficulty_key(difficulty), DEFAULT_FOCUS)


def build_question_prompt(
    specialty: str,
    difficulty: Union[str, Difficulty],
    count: int,
    topics: Optional[str] = None,
    family: PromptFamily = "detailed",
) -> str:
    level = _difficulty_key(difficulty)
    topics_line = f"- Specific topics to focus on: {topics}\n" if topics else ""

    if family == "compact":
        return f"""Generate {count} short answer medical questions based on the UKMLA curriculum for UK clinical medical students.

- Specialty: {specialty}
- Difficulty: {level}
- Target Year Level: {target_year_for(level)}
{topics_line}
For each question, provide:
1. A realistic clinical scenario
2. A specific question for the student to answer
3. An ideal model answer that would receive full marks
4. 3-5 strengths to look for in student answers
5. 3-5 common areas for improvement
6. 3-5 additional learning points related to the case

Format the response as a JSON object with the following structure:
{{
  "questions": [
    {{
      "specialty": "{specialty}",
      "difficulty": "{level}",
      "scenario": "The clinical scenario text...",
      "question": "The specific question...",
      "modelAnswer": "The ideal answer to receive full marks...",
      "strengths": ["Strength 1", "Strength 2"],
      "areasForImprovement": ["Area 1", "Area 2"],
      "learningPoints": ["Learning point 1", "Learning point 2"],
      "relatedResources": [
        {{"type": "pdf|video|guide|case", "title": "Resource title", "url": "https://example.com/resource"}}
      ]
    }}
  ]
}}

Please ensure your response is a properly formatted JSON object with the structure shown above."""

    return f"""You are an experienced medical educator creating high-quality short answer questions for UK medical students that align with the UKMLA framework. Generate {count} clinical case scenarios for UK medical students based on the UKMLA curriculum.

## Question Parameters
- Specialty: {specialty}
- Difficulty Level: {level}
- Target Year Level: {target_year_for(level)}
{topics_line}
## Question Structure
For each question:
1. Create a realistic clinical vignette (130-180 words) that includes:
   - Relevant demographic information (age, gender)
   - Presenting complaint with clear timeline
   - Key history elements (positive and negative findings)
   - Physical examination findings
   - Relevant test results with reference ranges

2. After the vignette, include 1-3 specific questions that:
   - Test clinical reasoning and knowledge application (not just recall)
   - Are appropriate for the {level} difficulty level
   - Require short essay responses (limit: 600-800 characters)
   - Have specific mark allocation (e.g., i, ii, iii with marks shown)

3. For {level} level, focus on {focus_for(level)}.

## Answer Requirements
For each question, provide:
1. A concise, accurate model answer that would receive full marks
2. 2-3 specific, actionable strengths to look for in student answers
3. 2-3 specific, actionable areas for improvement
4. 2-3 focused learning points directly related to the case
5. 2-3 related resources with valid URLs to UK medical resources (NHS, NICE, BMJ Best Practice)

## Output Format
Return ONLY a JSON object with this structure:
{{
  "questions": [
    {{
      "specialty": "{specialty}",
      "difficulty": "{level}",
      "scenario": "The clinical case scenario text...",
      "question": "The specific question text with numbered sub-questions and mark allocation...",
      "modelAnswer": "The concise, accurate model answer...",
      "strengths": ["Specific, actionable strength 1", "Specific, actionable strength 2"],
      "areasForImprovement": ["Specific, actionable area 1", "Specific, actionable area 2"],
      "learningPoints": ["Focused learning point 1", "Focused learning point 2"],
      "relatedResources": [
        {{"title": "NICE Guidelines - [Specific Topic]", "url": "https://www.nice.org.uk/guidance/[guideline-id]"}}
      ]
    }}
  ]
}}

Ensure all questions are clinically accurate, reflect current UK medical practice, and use clear, unambiguous language."""


def build_evaluation_prompt(question: QuestionLike, user_answer: str, family: PromptFamily = "detailed") -> str:
    if family == "compact":
        return f"""Evaluate this medical student's answer to a short answer question based on the UKMLA curriculum.

Question: {question.question}
Clinical Scenario: {question.scenario}
Student's Answer: {user_answer}

The model answer is: {question.model_answer}

Please evaluate the answer considering:
1. Clinical accuracy
2. Completeness
3. Relevance
4. Clarity of expression

Return a JSON object with the following structure:
{{
  "score": <percentage score between 0-100>,
  "modelAnswer": "HTML formatted model answer with key points highlighted",
  "strengths": ["Strength 1", "Strength 2", "Strength 3"],
  "areasForImprovement": ["Area 1", "Area 2", "Area 3"],
  "learningPoints": ["Learning point 1", "Learning point 2", "Learning point 3"],
  "relatedResources": [
    {{"type": "pdf|video|guide|case", "title": "Resource title", "url": "https://example.com/resource"}}
  ]
}}

Ensure your response is properly formatted as a JSON object as shown above."""

    return f"""You are an experienced medical educator providing detailed assessment of a medical student's answer to a short answer question based on the UKMLA curriculum.

## Question Information
Question: {question.question}
Clinical Scenario: {question.scenario}
Student's Answer: {user_answer}
Model Answer: {question.model_answer}

## Assessment Guidelines
Compare the student's answer with the model answer and evaluate:
1. Clinical reasoning: pathophysiology, diagnostic approach, management rationale
2. Answer components: key concepts present, missing critical elements, additional valid points
3. Alternative acceptable approaches (regional variations, other evidence-based options)
4. Unacceptable elements that receive no credit (outdated, dangerous or incorrect concepts)

## Score Guidance
Score on a scale of 1-10 (with 10 being perfect) based on:
- Clinical accuracy and relevance (50%)
- Completeness of key points (25%)
- Application of clinical reasoning (25%)

## Return Format
Return ONLY a JSON object with the following structure:
{{
  "score": <number between 1-10>,
  "modelAnswer": "Concise model answer with key points clearly articulated",
  "strengths": ["Specific strength highlighting what the student did well"],
  "areasForImprovement": ["Specific, actionable area for improvement with rationale"],
  "learningPoints": ["Focused learning point directly relevant to the case"],
  "relatedResources": [
    {{"title": "NICE Guidelines - Specific condition/management", "url": "https://www.nice.org.uk/guidance/ng123"}}
  ]
}}

Be concise and specific - each feedback point should be no more than 1-2 sentences."""
