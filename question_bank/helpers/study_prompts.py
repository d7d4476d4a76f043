# Manages prompts sent to the language model for the study assistant


COMPLETION_MARKER = "REFINAMENTO_COMPLETO:"


class StudyPromptManager:
    # Core prompt templates for generation, search refinement and explanations

    def get_prompt_for_task(self, task, context):
        # Route to appropriate prompt based on task
        prompts = {
            'generation': self.get_generation_messages,
            'refinement': self.get_refinement_messages,
            'explanation': self.get_explanation_messages,
        }

        if task not in prompts:
            raise ValueError(f"Unknown task: {task}")

        return prompts[task](context)

    def get_generation_messages(self, context):
        system = (
            "Você é um assistente especializado em gerar questões de concursos públicos brasileiros. "
            "Quando o usuário pedir sobre um tópico, gere 3-5 questões de múltipla escolha relevantes, "
            "bem formatadas e com gabarito. Seja claro, objetivo e educacional."
        )
        return [
            {"role": "system", "content": system},
            {"role": "user", "content": f"Gere questões de concurso sobre: {context['query']}"},
        ]

    def get_refinement_system_prompt(self, missing_aspects, known_aspects=()):
        # missing_aspects / known_aspects: bullet descriptions, e.g.
        # "Banca organizadora (CESGRANRIO, FCC, CESPE, FGV)"
        if missing_aspects:
            ask_block = "\n".join(f"• {aspect}" for aspect in missing_aspects)
        else:
            ask_block = "(nenhum: o tópico já traz todas as informações)"

        known_block = ""
        if known_aspects:
            known_lines = "\n".join(f"- {aspect}" for aspect in known_aspects)
            known_block = f"""
O usuário JÁ informou (NÃO pergunte sobre estes):
{known_lines}
"""

        return f"""Você é um assistente especializado em ajudar estudantes a encontrar questões de concursos públicos brasileiros. Seu objetivo é coletar informações para refinar a busca.

IMPORTANTE: Pergunte APENAS sobre os aspectos listados abaixo, que o usuário ainda não mencionou.

Aspectos a perguntar:
{ask_block}
{known_block}
FORMATO DA RESPOSTA:
1. Cumprimente brevemente e mencione o tópico
2. Liste com bullets (•) APENAS os aspectos a perguntar
3. Mantenha clean, sem emojis ou numeração
4. Inclua exemplos entre parênteses
5. Termine com: "Você pode informar o que souber ou pular."

Quando o usuário responder, resuma em:
{COMPLETION_MARKER}
- Tópico: [tópico original]
- Banca: [nome ou "qualquer"]
- Instituição: [nome ou "qualquer"]
- Cargo: [cargo ou "qualquer"]
- Período: [ano ou "qualquer"]
- Disciplina: [disciplina ou "qualquer"]"""

    def get_refinement_messages(self, context):
        system = self.get_refinement_system_prompt(
            context['missing_aspects'],
            context.get('known_aspects', ()),
        )
        return [{"role": "system", "content": system}, *context['messages']]

    def get_explanation_messages(self, context):
        system = """Você é um professor especializado em concursos públicos brasileiros.
Sua função é explicar questões de forma clara e didática, ajudando o aluno a entender:
- Por que a resposta correta está correta
- Métodos alternativos de resolução
- Conceitos-chave envolvidos
- Dicas para questões similares

Seja objetivo, didático e use linguagem acessível."""

        user = f"""Questão: {context['question_stem']}

Resposta correta: {context['correct_answer']}

Pergunta do aluno: {context['user_question']}"""

        return [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ]


study_prompt_manager = StudyPromptManager()
