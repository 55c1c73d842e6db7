"""Prompt templates for the LLM backend and chat modes."""

from __future__ import annotations

import json
from typing import Any

PAIN_ANALYSIS_PROMPT = """\
You are an experienced business consultant. Perform a detailed pain analysis
of the following business problem.

User's problem:
{user_input}

## Perspectives

Identify and structure concrete pains from these angles:

1. Operational efficiency
2. Cost and resources
3. Quality and accuracy
4. Scalability
5. User experience
6. Data and information management
7. Compliance and risk

## Per pain

For each pain include a clear title, a detailed description (current state
and problem), severity (high/medium/low), category, business impact,
frequency, background (why the problem arises: history and environment) and
root cause (the underlying cause, not the symptom).

## Structural analysis

Also provide the problem domain, the affected stakeholders, the constraints
any solution must respect, and the dependencies on other problems.

Number pain ids as "P-001", "P-002", ...
"""

SOLUTION_DESIGN_PROMPT = """\
You are an experienced solution architect. Design concrete solutions for the
pain analysis below.

Original problem:
{user_input}

Pain analysis:
{pain_analysis}

## Perspectives

1. Automation and efficiency
2. Data integration and visualization
3. AI and machine learning
4. Workflow optimization
5. Quality control and monitoring

## Per solution

For each solution include a title, a detailed description, the pain ids it
addresses, the technical approach, the technology stack, priority
(high/medium/low), effort estimate, expected impact, background (why this
solution fits), architecture (components, data flow, integration) and
feasibility (technical, organizational, budget).

## Structural analysis

Also provide design principles, the overall technical approach, risks with
mitigations, and success metrics.

Number solution ids as "S-001", "S-002", ...
"""

AGENT_GENERATION_PROMPT = """\
You are an experienced AI agent designer. Design concrete AI agents that
implement the solutions below.

Original problem:
{user_input}

Pain analysis:
{pain_analysis}

Solution design:
{solution_design}

Consider data processing, analysis and decision, automation and execution,
monitoring and alerting, and reporting and visualization agents.

For each agent provide a concrete kebab-case name (e.g. resume-parser,
skill-normalizer, matcher-core), a description of its role, its
capabilities, the solution ids it serves, input format, output format,
dependencies on other agents or services, and scalability requirements.
"""

MANIFEST_GENERATION_PROMPT = """\
You are an experienced Kubernetes engineer. Generate Cloud Run compatible
Kubernetes manifests for the agents below.

Agent specifications:
{agent_generation}

For each agent include metadata with labels, a container image in
gcr.io/project-id/agent-name:latest form, ports (usually 8080), environment
variables, CPU and memory requests and limits, and settings suited to
Cloud Run.
"""

CHAT_SYSTEM_PROMPTS: dict[str, str] = {
    "pain-analysis": """\
You are a business problem analyst. Analyse the user's business problem and
report:

1. The essence of the problem behind the surface symptoms
2. Scope and severity of its impact
3. Affected stakeholders
4. Current constraints blocking a solution
5. Urgency and importance

Give concrete, actionable insight.""",
    "solution-design": """\
You are a solution design expert. Based on the pain analysis, describe:

1. Solution overview
2. Functional requirements
3. Technical requirements and stack
4. Step-by-step implementation plan
5. Success metrics
6. Risks and mitigations

Propose concrete solutions that can be built.""",
    "agent-generation": """\
You are an AI agent design expert. Based on the solution design, specify
executable AI agents:

1. Agent lineup and roles
2. Inputs and outputs of each agent
3. Flow between agents
4. Tools and APIs each agent needs
5. Runtime and deployment requirements

Structure the result so it can be turned into YAML manifests.""",
    "general": "You are a helpful, knowledgeable AI assistant. Answer the user's questions carefully.",
}


def as_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def chat_system_prompt(mode: str) -> str:
    """System prompt for a chat mode, falling back to the general assistant."""
    return CHAT_SYSTEM_PROMPTS.get(mode, CHAT_SYSTEM_PROMPTS["general"])
