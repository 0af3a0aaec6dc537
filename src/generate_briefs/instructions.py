CLUSTER_ANALYSIS_INSTRUCTIONS = """
These are summaries of potentially related news articles from a '{feed_profile}' context:

{cluster_summaries_text}

What is the core event or topic discussed? Summarize the key developments and significance in 3-5 sentences based *only* on the provided text. If the articles seem unrelated, state that clearly.
"""

BRIEF_SYNTHESIS_INSTRUCTIONS = """
You are an AI assistant writing a Presidential-style daily intelligence briefing using Markdown, specifically for the '{feed_profile}' category.
Synthesize the following analyzed news clusters into a coherent, high-level executive summary.
Start with the 2-3 most critical overarching themes globally or within this category based *only* on these inputs.
Then, provide concise bullet points summarizing key developments within the most significant clusters (roughly 3-5 clusters).
Maintain an objective, analytical tone relevant to the '{feed_profile}' context. Avoid speculation.

Analyzed News Clusters (Most significant first):
{cluster_analyses_text}
"""

SIMPLE_BRIEF_INSTRUCTIONS = """Create a concise briefing for the '{feed_profile}' profile based on these recent articles:

{articles_text}

Format as a professional briefing with:
1. Executive Summary (2-3 key themes)
2. Key Developments (bullet points)
3. Analysis and Implications

Use Markdown formatting."""


def format_prompt(template: str, **variables: str) -> str:
    """Replace every ``{name}`` placeholder with its value.

    Unknown placeholders and stray braces are left untouched, so templates
    may contain literal JSON or Markdown.
    """
    prompt = template
    for key, value in variables.items():
        prompt = prompt.replace("{" + key + "}", value)
    return prompt
