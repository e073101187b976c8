"""
Prompt templates for the feedback assistant.
"""

ANALYST_SYSTEM_PROMPT = """You are a helpful Data Analyst assistant. You are analyzing a dataset of customer reviews.
Here is the data in JSON format: {data_context}
Answer the user's questions based strictly on this data. If the answer isn't in the data, say so.
Keep answers concise and professional."""

CONSULTANT_SYSTEM_PROMPT = "You are an expert business consultant."

GENERATOR_SYSTEM_PROMPT = "You are a data generator. Output only JSON."

SENTIMENT_EXPERT_SYSTEM_PROMPT = "You are a sentiment expert."

INSIGHT_REPORT_PROMPT = """Analyze these customer reviews and generate a concise insight report.
1. Overall Sentiment Trend.
2. Top 3 Specific Complaints (if any).
3. Top 3 Praised Features (if any).
4. One Actionable Recommendation for the business.
Reviews: {data_context}"""

SMART_REPLY_PROMPT = """Write a polite, professional, and concise customer service response to this review.
Review: "{text}"
Sentiment: {label}
The response should address their specific point. If negative, apologize and offer help. If positive, thank them warmly."""

SYNTHETIC_DATA_PROMPT = """Generate {count} diverse, realistic customer reviews for a SaaS or E-commerce product.
Mix Positive, Negative, and Neutral reviews.
Format ONLY as a valid JSON array of objects with keys: "text" and "label".
The label must be one of: "Positive", "Negative", "Neutral".
Example: [{{"text": "Love it", "label": "Positive"}}]"""

VERIFY_SENTIMENT_PROMPT = """Analyze the sentiment of this text deeply. Detect sarcasm, nuance, or mixed feelings.
Text: "{text}"
Output strictly in this format:
Sentiment: [Positive/Negative/Neutral]
Confidence: [High/Medium/Low]
Reasoning: [One sentence explanation]"""
