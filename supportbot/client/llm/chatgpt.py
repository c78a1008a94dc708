from openai import OpenAI

import supportbot.config.config as configs

client = OpenAI(api_key=configs.OPENAI_API_KEY)


def call_llm(system_prompt: str, message: str) -> str:
    response = client.chat.completions.create(
        model=configs.MODEL,
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": message},
        ],
        max_tokens=configs.MAX_TOKENS,
        temperature=configs.TEMPERATURE,
    )
    return response.choices[0].message.content or ""
