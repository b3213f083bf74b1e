"""
Prompt Builder

Builds the per-hunk review prompt, the exemption explanation prompt and
the fixed human-facing messages posted on the pull request.
"""

import logging
from typing import List

from ..models.pr_diff import DiffFile, Hunk, PRContext


logger = logging.getLogger(__name__)

REVIEW_JSON_FORMAT = '{"reviews": [{"lineNumber":  <line_number>, "reviewComment": "<review comment>"}]}'

LGTM_MESSAGE = "LGTM! 👍"

EXEMPTION_FALLBACK_REASON = (
    "O autor da PR indicou que as alterações não necessitam de testes."
)


class PromptBuilder:
    """
    Builds prompts and messages for the review run.

    All human-facing text is emitted in a single fixed language.
    """

    def __init__(self, language: str = "português"):
        """
        Initialize prompt builder.

        Args:
            language: Natural language the model must answer in
        """
        self.language = language

    def build_review_prompt(self, file: DiffFile, hunk: Hunk, pr: PRContext) -> str:
        """
        Build the review prompt for a single hunk.

        Args:
            file: File the hunk belongs to
            hunk: Hunk to review
            pr: Pull request context

        Returns:
            Complete prompt string
        """
        logger.debug(f"Building review prompt for {file.to_path} {hunk.header}")

        return f"""Your task is to review pull requests. Instructions:
- Provide the response in following JSON format:  {REVIEW_JSON_FORMAT}
- Do not give positive comments or compliments.
- Provide comments and suggestions ONLY if there is something to improve, otherwise "reviews" should be an empty array.
- Write the comment in GitHub Markdown format.
- Use the given description only for the overall context and only comment the code.
- IMPORTANT: NEVER suggest adding comments to the code.
- Respond in {self.language}.

Review the following code diff in the file "{file.to_path}" and take the pull request title and description into account when writing the response.

Pull request title: {pr.title}
Pull request description:

---
{pr.description}
---

Git diff to review:

```diff
{self.format_hunk(hunk)}
```
"""

    @staticmethod
    def format_hunk(hunk: Hunk) -> str:
        """Render a hunk with each change line prefixed by its line number."""
        lines = [hunk.header]
        lines.extend(f"{change.line_number} {change.content}" for change in hunk.changes)
        return "\n".join(lines)

    def build_exemption_prompt(self, pr: PRContext) -> str:
        """Build the prompt asking for a summary of the exemption justification."""
        return f"""A pull request author declared that the changes do not need tests.
Summarize, in one or two sentences and in {self.language}, the justification given in the pull request description below.
Write it as a note to be appended to an approval message. Do not add a greeting, a title or any formatting besides plain text.

Pull request title: {pr.title}
Pull request description:

---
{pr.description}
---
"""

    @staticmethod
    def build_test_warning(missing_tests: List[str], exemption_keywords: List[str]) -> str:
        """Build the issue comment posted when tests are missing."""
        files = "\n".join(f"- `{path}`" for path in missing_tests)
        keywords = "\n".join(f'- "{keyword}"' for keyword in exemption_keywords)

        return f"""⚠️ Verificação de Testes

Esta PR contém alterações em arquivos que requerem testes, mas nenhum teste foi encontrado.

Arquivos que precisam de testes:
{files}

Por favor:
1. Adicione testes apropriados para as alterações realizadas, ou
2. Inclua uma justificativa no corpo da PR caso os testes não sejam necessários.

Use uma das seguintes palavras-chave na descrição da PR para indicar que não são necessários testes:
{keywords}"""

    @staticmethod
    def build_approval_message(exemption_reason: str = "") -> str:
        """Build the body of the approval review."""
        if not exemption_reason:
            return LGTM_MESSAGE
        return f"""{LGTM_MESSAGE}

ℹ️ Testes dispensados: {exemption_reason}"""
