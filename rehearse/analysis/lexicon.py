"""Fixed word and phrase lists used by the transcript analysis engine."""

import re

FILLER_WORDS = frozenset([
    "um", "uh", "like", "actually", "basically", "literally", "right", "okay",
    "so", "well", "anyway", "just", "very", "really", "obviously", "seriously",
    "totally", "essentially",
])

# Matched on adjacent token pairs
FILLER_PHRASES = frozenset([
    ("kind", "of"),
    ("sort", "of"),
    ("i", "mean"),
])

TECHNICAL_TERMS = frozenset([
    # Programming
    "algorithm", "api", "architecture", "backend", "cloud", "code", "coding",
    "database", "debugging", "deployment", "devops", "framework", "frontend",
    "infrastructure", "integration", "microservices", "optimization",
    "performance", "python", "java", "javascript", "refactoring", "scalability",
    "software", "sql", "testing", "kubernetes", "docker", "latency", "system",
    # Finance
    "accounting", "assets", "audit", "budget", "capital", "cashflow",
    "compliance", "equity", "forecast", "investment", "liquidity", "portfolio",
    "revenue", "risk", "valuation", "margin", "profit", "roi",
    # Healthcare
    "clinical", "diagnosis", "patient", "treatment", "therapy", "medication",
    "healthcare", "hospital", "protocol", "regulatory", "hipaa", "nursing",
    # Marketing
    "analytics", "brand", "campaign", "conversion", "engagement", "funnel",
    "marketing", "metrics", "segmentation", "seo", "strategy", "stakeholder",
    "stakeholders", "retention", "acquisition", "kpi",
])

POSITIVE_WORDS = frozenset([
    "good", "great", "excellent", "positive", "success", "successful",
    "achieved", "improved", "enjoy", "enjoyed", "happy", "proud", "love",
    "benefit", "effective", "helpful", "strong", "win", "won", "best",
])

ENTHUSIASM_WORDS = frozenset([
    "excited", "exciting", "passionate", "passion", "eager", "thrilled",
    "love", "amazing", "fantastic", "motivated", "inspired", "energized",
    "enthusiastic", "driven", "curious", "fascinated",
])

CONFIDENCE_WORDS = frozenset([
    "confident", "certain", "sure", "definitely", "clearly", "led",
    "delivered", "achieved", "decided", "built", "managed", "created",
    "implemented", "ensured", "accomplished", "solved", "i'm", "will",
])

# Connective words used for the coherence score
CONNECTIVE_WORDS = frozenset([
    "first", "firstly", "second", "secondly", "third", "then", "next", "after",
    "afterwards", "finally", "also", "additionally", "furthermore", "moreover",
    "however", "therefore", "thus", "consequently", "because", "since",
    "although", "meanwhile", "similarly", "instead", "besides", "otherwise",
    "hence", "and", "but", "while", "later", "ultimately", "overall",
])

INTRODUCTION_PATTERN = re.compile(
    r"\b(let me (start|begin)|to (start|begin) with|first of all|in my (experience|role)"
    r"|my name is|i am a|i'm a|i have been|i've been|i would like to)\b",
    re.IGNORECASE,
)

TRANSITION_PATTERN = re.compile(
    r"\b(for example|for instance|in addition|on the other hand|as a result"
    r"|after that|because of this|that said|moving on|next|then|however|furthermore"
    r"|moreover|additionally)\b",
    re.IGNORECASE,
)

CONCLUSION_PATTERN = re.compile(
    r"\b(in conclusion|to conclude|to sum up|in summary|overall|ultimately|finally"
    r"|in the end|as a result|that's why|which is why)\b",
    re.IGNORECASE,
)
