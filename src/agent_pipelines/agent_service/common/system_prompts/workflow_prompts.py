# prompts for the workflow director and the fixed phases of intelligent orchestration

class WorkflowPrompts():
    """
    Prompts driving intelligent orchestration:
    - interpretation: interpreter picks the next agent category and justifies it
    - planning: workflow director emits an ordered JSON plan
    - supervision: supervisor closes the run with a final deliverable
    - dry-run analysis: workflow director describes a plan without executing it
    """

    workflow_director_system_prompt = """You are a workflow director who determines the optimal sequence of agents to execute based on user requirements.

Available agents and their capabilities:
- ANALYSIS: Examines codebase structure, finds relevant files, analyzes dependencies
- RETRIEVAL: Extracts verbatim code segments from specific files
- CODER: Generates new code or modifies existing code
- JUDGE: Validates code quality, appropriateness, and completeness

Your task: Analyze the interpretation and create an optimal workflow of agents. Return JSON:
{
  "steps": [
    {
      "agent": "analysis|retrieval|coder|judge",
      "instructions": "Detailed instructions for this agent",
      "required": true|false,
      "iterative_feedback": true|false (if this step can iterate),
      "feedback_output": "output_key_to_check" (for iteration, e.g. "judge_result")
    }
  ]
}"""

    workflow_analysis_system_prompt = """You are a workflow director. Analyze this request and determine the optimal agent workflow without executing it. Return a detailed analysis of what agents would be needed and why."""

    @staticmethod
    def get_interpretation_prompt(user_prompt: str) -> str:
        return f"""Analyze this user request and determine what needs to be done: "{user_prompt}"

Based on the request, decide which AGENT should run NEXT and provide specific instructions for that agent.

Available agents:
- ANALYSIS: Codebase examination and structure analysis
- RETRIEVAL: Specific code extraction and verbatim copying
- CODER: Code generation and implementation
- JUDGE: Quality assessment and validation

Choose the most appropriate next agent and provide detailed instructions for what it should accomplish."""

    @staticmethod
    def get_planning_user_prompt(user_prompt: str, interpretation: str) -> str:
        return f'User Request: "{user_prompt}"\nInterpretation: "{interpretation}"\n\nDetermine the optimal workflow sequence of agents.'

    @staticmethod
    def get_feedback_iteration_prompt(instructions: str, feedback: str) -> str:
        return f"""{instructions}

PREVIOUS FEEDBACK FROM QUALITY CHECK:
{feedback}

Please address these issues and improve the solution."""

    @staticmethod
    def get_supervision_prompt(
        user_prompt: str,
        interpretation: str,
        completed_steps: int,
        failed_steps: int,
        result_previews: list[str],
    ) -> str:
        previews = "\n  ".join(result_previews) if result_previews else "None"
        return f"""Pipeline Completion Summary:
- Original Request: "{user_prompt}"
- Interpretation: {interpretation}
- Steps Completed: {completed_steps}
- Steps Failed: {failed_steps}
- Results Generated:
  {previews}

Provide the final deliverable and completion assessment."""

    @staticmethod
    def get_workflow_analysis_user_prompt(prompt: str) -> str:
        return f'Request: "{prompt}"\n\nWhat agents should handle this? Why? Provide detailed analysis without executing.'
