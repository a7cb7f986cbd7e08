"""
Prompt templates and tool schemas for the makeaplan generation steps.
"""

ROUND_FOCUS = {
    2: "follow-up questions focusing on user experience, user stories, and product differentiation",
    3: "technical implementation questions about architecture, integrations, and development approach",
}


QUESTIONS_TOOL = {
    "name": "submit_questions",
    "description": "Submit the multiple-choice questions for this discovery round.",
    "input_schema": {
        "type": "object",
        "properties": {
            "questions": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "question": {"type": "string", "description": "The question text."},
                        "choices": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "Distinct answer choices, most likely first.",
                        },
                    },
                    "required": ["question", "choices"],
                },
            }
        },
        "required": ["questions"],
    },
}


_TREE_NODE_SCHEMA = {
    "type": "object",
    "properties": {
        "type": {"type": "string", "enum": ["file", "directory"]},
        "name": {"type": "string"},
        "description": {"type": "string"},
        "children": {
            "type": "array",
            "items": {"type": "object"},
            "description": "Child nodes with the same shape (directories only).",
        },
    },
    "required": ["type", "name"],
}

FILE_TREE_TOOL = {
    "name": "submit_file_tree",
    "description": "Submit the project file structure as a nested tree of files and directories.",
    "input_schema": {
        "type": "object",
        "properties": {"root": _TREE_NODE_SCHEMA},
        "required": ["root"],
    },
}


SYSTEM_PROMPT = (
    "You are an expert product designer and software architect helping to "
    "refine and develop product ideas."
)


def get_questions_prompt(idea: str, round_number: int, prior_qa: list[dict[str, str]],
                         questions_count: int, answers_per_question: int) -> str:
    """Build the prompt for one round of multiple-choice questions.

    The model answers through ``QUESTIONS_TOOL``; the tag format described at
    the end is the fallback when it replies with plain text instead.
    """
    if round_number == 1:
        prompt = f'I have a product idea: "{idea}".\n\n'
        prompt += (
            f"Please ask me {questions_count} multiple choice questions to better understand "
            "my requirements, target audience, and key features.\n"
        )
    else:
        prompt = f'Original idea: "{idea}"\n\n'
        prompt += "Previous questions and answers:\n"
        for i, qa in enumerate(prior_qa, 1):
            answer = qa["answer"] or "(skipped)"
            prompt += f"Q{i}: {qa['question']}\nA{i}: {answer}\n\n"
        focus = ROUND_FOCUS.get(round_number, ROUND_FOCUS[3])
        prompt += f"Based on the previous answers, ask {questions_count} {focus}.\n"

    prompt += (
        f"\nProvide exactly {questions_count} questions with exactly "
        f"{answers_per_question} choices each.\n"
        "If you cannot call the submit_questions tool, format your response as:\n"
        "<questions>\n<question>\n<text>Your question here</text>\n<choices>\n"
    )
    for i in range(1, answers_per_question + 1):
        prompt += f"<choice>Option {i}</choice>\n"
    prompt += "</choices>\n</question>\n</questions>\n"
    return prompt


WRITEUP_SECTIONS = [
    "Executive Summary",
    "Product Overview and Goals",
    "Target Audience and User Personas",
    "Core Features and Functionality",
    "Technical Architecture",
    "Data Models and Database Design",
    "API Design and Integrations",
    "Security Considerations",
    "Performance Requirements",
    "Development Roadmap and Milestones",
]


def get_writeup_prompt(idea: str, all_questions: list[str], all_answers: list[str]) -> str:
    """Build the prompt for the technical specification."""
    qa_list = "\n\n".join(
        f"Q: {q}\nA: {all_answers[i] if i < len(all_answers) and all_answers[i] else '(skipped)'}"
        for i, q in enumerate(all_questions)
    )
    sections = "\n".join(f"{i}. {name}" for i, name in enumerate(WRITEUP_SECTIONS, 1))

    return f"""Based on the following product idea and Q&A session, create a comprehensive technical specification document.

Original Idea: "{idea}"

Questions and Answers:
{qa_list}

Please create a detailed technical specification that includes:
{sections}

Use markdown formatting and be thorough but concise. Focus on actionable technical details.

Wrap your entire response in <writeup> tags."""


def get_file_structure_prompt(writeup: str) -> str:
    """Build the prompt for the tree-formatted project layout."""
    return f"""Based on this technical specification, create an optimal file structure for the project.

Technical Specification:
{writeup}

Please create a comprehensive file structure that:
1. Follows modern best practices
2. Groups related files logically
3. Includes all necessary configuration files
4. Identifies key dependencies and packages needed

Format the output as a tree structure with descriptions for important files/directories.

Wrap your response in <filestructure> tags."""


def get_json_conversion_prompt(file_structure: str) -> str:
    """Build the prompt converting the tree text into ``FILE_TREE_TOOL`` input."""
    return f"""Convert this file structure to a JSON tree:

{file_structure}

Every item has:
- type: "file" or "directory"
- name: the file/directory name
- description: (optional) description of the file/directory
- children: (directories only) array of child items

Return a single root directory item. If you cannot call the submit_file_tree tool, wrap the JSON in <json> tags."""
