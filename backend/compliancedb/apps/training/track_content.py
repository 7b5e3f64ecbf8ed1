# backend/compliancedb/apps/training/track_content.py
"""
Raw training content, keyed by track value.

Edited by the content team; `catalog.load_catalog` validates it at import.
Answer indexes are zero-based.
"""

TRACK_CONTENT = {
    "recruiter": {
        "title": "Recruiter Compliance Training",
        "description": "Essential training for recruiters using AI tools in the hiring process",
        "target_audience": "Recruiters, Talent Acquisition Specialists",
        "estimated_time": "45 minutes",
        "sections": [
            {
                "number": 1,
                "title": "Understanding AI in Recruitment",
                "description": "Learn what counts as AI in the hiring process and why it matters",
                "video_duration_seconds": 480,
                "content": (
                    "AI in recruitment covers any automated or algorithmic system that processes "
                    "candidate information: resume screening with auto-filtering, screening chatbots, "
                    "video interview analysis, algorithmically scored assessments and predictive "
                    "hiring analytics. Recruiters are usually the first users of these tools, so "
                    "recognising them is the basis for notifying candidates, documenting consent, "
                    "offering alternatives and keeping compliance records."
                ),
                "quiz": [
                    {
                        "id": "r1q1",
                        "question": "Which of the following is considered AI in hiring under most state laws?",
                        "options": [
                            "Manual resume review by a human",
                            "Automated resume screening that filters candidates",
                            "Phone calls to schedule interviews",
                            "Sending job offer letters",
                        ],
                        "correct_answer": 1,
                        "explanation": (
                            "Automated resume screening that filters candidates without human review "
                            "is considered AI/AEDT under most state laws."
                        ),
                    },
                    {
                        "id": "r1q2",
                        "question": "When must candidates be notified about AI use?",
                        "options": [
                            "After they're hired",
                            "Only if they ask",
                            "Before AI processing occurs",
                            "Never, it's optional",
                        ],
                        "correct_answer": 2,
                        "explanation": (
                            "Most state laws require notification before AI processing occurs, giving "
                            "candidates time to understand and potentially opt out."
                        ),
                    },
                    {
                        "id": "r1q3",
                        "question": "What should you do if a candidate requests an alternative to AI screening?",
                        "options": [
                            "Tell them it's not possible",
                            "Ignore the request",
                            "Document the request and provide a human review alternative",
                            "Reject their application",
                        ],
                        "correct_answer": 2,
                        "explanation": (
                            "Several state laws require alternatives on request. Document the request "
                            "and route the candidate to human review."
                        ),
                    },
                ],
            },
            {
                "number": 2,
                "title": "Disclosure Requirements",
                "description": "How to properly notify candidates about AI use",
                "video_duration_seconds": 420,
                "content": (
                    "A disclosure notice tells candidates that AI is used, what it evaluates, how it "
                    "affects the decision and how to request an alternative. It must be clear, "
                    "conspicuous and delivered before any AI processing of the candidate's data."
                ),
                "quiz": [
                    {
                        "id": "r2q1",
                        "question": "What must be included in an AI disclosure notice?",
                        "options": [
                            "Company revenue information",
                            "Names of all hiring managers",
                            "How AI affects hiring decisions and how to request alternatives",
                            "Salary ranges for all positions",
                        ],
                        "correct_answer": 2,
                        "explanation": (
                            "Disclosures must explain how AI affects decisions and, in many "
                            "jurisdictions, how candidates can request alternatives."
                        ),
                    },
                    {
                        "id": "r2q2",
                        "question": "When should AI disclosure be provided to candidates?",
                        "options": [
                            "After they accept a job offer",
                            "Before any AI processing of their data",
                            "Only during the final interview",
                            "When they ask for it",
                        ],
                        "correct_answer": 1,
                        "explanation": "Disclosure must occur before AI processing so candidates can make an informed choice.",
                    },
                ],
            },
            {
                "number": 3,
                "title": "Consent & Documentation",
                "description": "Recording and maintaining compliance records",
                "video_duration_seconds": 360,
                "content": (
                    "Some jurisdictions require explicit consent, for example before AI analysis of "
                    "recorded video interviews. Keep consent, disclosure and opt-out records for at "
                    "least four years and make sure every opt-out ends in a documented human review."
                ),
                "quiz": [
                    {
                        "id": "r3q1",
                        "question": "In Illinois, when is explicit consent required for AI video analysis?",
                        "options": [
                            "Never",
                            "Before the video interview is recorded",
                            "After the interview is completed",
                            "Only for executive positions",
                        ],
                        "correct_answer": 1,
                        "explanation": "Illinois requires written consent before video interviews that will be analyzed by AI.",
                    },
                    {
                        "id": "r3q2",
                        "question": "How long should you retain consent records?",
                        "options": ["30 days", "1 year", "At least 4 years", "Forever"],
                        "correct_answer": 2,
                        "explanation": (
                            "Retaining records for at least 4 years covers the limitation period in "
                            "most jurisdictions."
                        ),
                    },
                    {
                        "id": "r3q3",
                        "question": "What should you do when a candidate opts out of AI screening?",
                        "options": [
                            "Reject their application",
                            "Document the request and ensure human review occurs",
                            "Tell them AI is mandatory",
                            "Ignore the request",
                        ],
                        "correct_answer": 1,
                        "explanation": "Always document opt-out requests and provide the human review alternative.",
                    },
                ],
            },
        ],
    },
    "manager": {
        "title": "Hiring Manager Compliance Training",
        "description": "Training for managers who make hiring decisions using AI-assisted tools",
        "target_audience": "Hiring Managers, Department Heads",
        "estimated_time": "40 minutes",
        "sections": [
            {
                "number": 1,
                "title": "Your Role in AI Compliance",
                "description": "Understanding your responsibilities as a hiring decision-maker",
                "video_duration_seconds": 420,
                "content": (
                    "AI tools can rank and recommend, but the hiring decision is yours. Apply your "
                    "own judgment to every recommendation, never reject a candidate on an AI score "
                    "alone and record why you reached each decision."
                ),
                "quiz": [
                    {
                        "id": "m1q1",
                        "question": "What is your primary responsibility regarding AI in hiring?",
                        "options": [
                            "Accept all AI recommendations without question",
                            "Apply human judgment and document decisions",
                            "Avoid using AI tools entirely",
                            "Let HR handle all AI decisions",
                        ],
                        "correct_answer": 1,
                        "explanation": "Hiring managers must apply human judgment to AI recommendations and document their reasoning.",
                    },
                    {
                        "id": "m1q2",
                        "question": "Can AI be the sole basis for rejecting a candidate?",
                        "options": [
                            "Yes, if the AI is accurate",
                            "Yes, for initial screening only",
                            "No, human review is required for adverse decisions",
                            "Yes, if documented properly",
                        ],
                        "correct_answer": 2,
                        "explanation": "Most laws require human review before an adverse employment decision.",
                    },
                ],
            },
            {
                "number": 2,
                "title": "Bias Prevention",
                "description": "How to identify and prevent algorithmic bias",
                "video_duration_seconds": 480,
                "content": (
                    "Models trained on historical hiring data can reproduce past discrimination, "
                    "including through proxies such as zip code that correlate with protected "
                    "characteristics. Watch for skewed screening patterns and report them."
                ),
                "quiz": [
                    {
                        "id": "m2q1",
                        "question": "How can AI systems perpetuate hiring bias?",
                        "options": [
                            "By using random selection",
                            "By learning from historical data that reflects past discrimination",
                            "By always preferring the most qualified candidate",
                            "AI cannot be biased",
                        ],
                        "correct_answer": 1,
                        "explanation": "AI trained on historical hiring data can learn discriminatory patterns.",
                    },
                    {
                        "id": "m2q2",
                        "question": "What is proxy discrimination?",
                        "options": [
                            "Discrimination through a staffing agency",
                            "When AI uses factors correlated with protected classes",
                            "Hiring someone to discriminate for you",
                            "Temporary bias",
                        ],
                        "correct_answer": 1,
                        "explanation": "Seemingly neutral factors can stand in for protected characteristics.",
                    },
                    {
                        "id": "m2q3",
                        "question": "What should you do if you notice patterns in AI screening?",
                        "options": [
                            "Ignore it, AI knows best",
                            "Document concerns and report to HR/compliance",
                            "Manually adjust AI scores",
                            "Stop using AI entirely",
                        ],
                        "correct_answer": 1,
                        "explanation": "Document specific examples and report them to HR or compliance.",
                    },
                ],
            },
            {
                "number": 3,
                "title": "Adverse Action Compliance",
                "description": "Requirements when not hiring a candidate",
                "video_duration_seconds": 360,
                "content": (
                    "When a candidate is rejected after AI-assisted screening, some jurisdictions "
                    "require notice and a way to request information about the AI used. Keep the "
                    "tools, recommendations, scores and your human review on file."
                ),
                "quiz": [
                    {
                        "id": "m3q1",
                        "question": "Under NYC Local Law 144, what must you provide after adverse action?",
                        "options": [
                            "Nothing, it's optional",
                            "Notice and ability to request information about AI use",
                            "Only a rejection email",
                            "Full explanation of all decisions",
                        ],
                        "correct_answer": 1,
                        "explanation": "Candidates must be notified and may request information about AI use.",
                    },
                    {
                        "id": "m3q2",
                        "question": "What should be documented for every AI-assisted adverse action?",
                        "options": [
                            "Only the final decision",
                            "AI tools used, recommendations, and human review process",
                            "Just the candidate's name",
                            "Nothing, unless requested",
                        ],
                        "correct_answer": 1,
                        "explanation": "Document the tools, recommendations, scores and the human review process.",
                    },
                ],
            },
        ],
    },
    "admin": {
        "title": "HR Admin Compliance Training",
        "description": "Comprehensive training for HR professionals managing AI compliance",
        "target_audience": "HR Directors, Compliance Officers, HR Business Partners",
        "estimated_time": "60 minutes",
        "sections": [
            {
                "number": 1,
                "title": "Regulatory Landscape",
                "description": "Overview of AI hiring laws across jurisdictions",
                "video_duration_seconds": 600,
                "content": (
                    "NYC requires annual independent bias audits for automated employment decision "
                    "tools. Colorado requires impact assessments for high-risk AI. Illinois regulates "
                    "AI video interviews and California gives candidates rights over automated "
                    "decision-making."
                ),
                "quiz": [
                    {
                        "id": "a1q1",
                        "question": "Which jurisdiction requires annual bias audits for AI hiring tools?",
                        "options": ["Illinois", "NYC", "Maryland", "Federal law"],
                        "correct_answer": 1,
                        "explanation": "NYC Local Law 144 requires annual independent bias audits.",
                    },
                    {
                        "id": "a1q2",
                        "question": "What does Colorado's AI Act require for high-risk AI in hiring?",
                        "options": [
                            "Nothing, it's not covered",
                            "Impact assessments and algorithmic discrimination protections",
                            "Only disclosure",
                            "Annual training only",
                        ],
                        "correct_answer": 1,
                        "explanation": "Colorado requires impact assessments and protections against algorithmic discrimination.",
                    },
                    {
                        "id": "a1q3",
                        "question": "What right does CCPA provide regarding AI in hiring?",
                        "options": [
                            "No relevant rights",
                            "Right to know and opt-out of automated decision-making",
                            "Only the right to sue",
                            "The right to a human interview",
                        ],
                        "correct_answer": 1,
                        "explanation": "CCPA gives a right to know about and opt out of automated decisions.",
                    },
                ],
            },
            {
                "number": 2,
                "title": "Building a Compliance Program",
                "description": "Creating policies and procedures for AI compliance",
                "video_duration_seconds": 540,
                "content": (
                    "Start with an inventory of every AI tool touching hiring, then write policies, "
                    "train staff annually and keep a documentation system for consents, disclosures "
                    "and audit trails."
                ),
                "quiz": [
                    {
                        "id": "a2q1",
                        "question": "What is the first step in building an AI compliance program?",
                        "options": [
                            "Writing policies",
                            "Training employees",
                            "Creating an inventory of all AI tools used",
                            "Hiring a consultant",
                        ],
                        "correct_answer": 2,
                        "explanation": "You must know which AI tools are in use before writing policy around them.",
                    },
                    {
                        "id": "a2q2",
                        "question": "How often should compliance training be renewed?",
                        "options": ["Only when laws change", "Every 5 years", "Annually", "Never, once is enough"],
                        "correct_answer": 2,
                        "explanation": "Annual recertification keeps staff current with evolving regulations.",
                    },
                    {
                        "id": "a2q3",
                        "question": "What should your documentation system track?",
                        "options": [
                            "Only rejected candidates",
                            "Consents, disclosures, and audit trails",
                            "Only successful hires",
                            "Nothing, it's optional",
                        ],
                        "correct_answer": 1,
                        "explanation": "Consents, disclosures and audit trails are the core of a compliance defense.",
                    },
                ],
            },
            {
                "number": 3,
                "title": "Bias Audits & Assessments",
                "description": "Conducting required audits and impact assessments",
                "video_duration_seconds": 480,
                "content": (
                    "NYC bias audits must be performed by an independent auditor and their results "
                    "published on the employer's website. Colorado impact assessments must be kept "
                    "for the duration of use plus three years."
                ),
                "quiz": [
                    {
                        "id": "a3q1",
                        "question": "Who can conduct a NYC bias audit?",
                        "options": [
                            "Anyone in the company",
                            "An independent auditor",
                            "The AI vendor",
                            "The hiring manager",
                        ],
                        "correct_answer": 1,
                        "explanation": "NYC requires an independent auditor.",
                    },
                    {
                        "id": "a3q2",
                        "question": "Where must NYC bias audit results be published?",
                        "options": [
                            "Internal memo only",
                            "Company website",
                            "Nowhere, they're private",
                            "Only sent to NYC",
                        ],
                        "correct_answer": 1,
                        "explanation": "Audit results must be publicly available on the employer's website.",
                    },
                    {
                        "id": "a3q3",
                        "question": "How long must Colorado impact assessments be retained?",
                        "options": ["1 year", "2 years", "Duration of use + 3 years", "Forever"],
                        "correct_answer": 2,
                        "explanation": "Colorado requires retention for the duration of use plus three years.",
                    },
                ],
            },
            {
                "number": 4,
                "title": "Managing Training & Certification",
                "description": "Running your organization's training program",
                "video_duration_seconds": 360,
                "content": (
                    "Everyone who uses, oversees or decides on the output of AI hiring tools needs "
                    "training. Certificates are valid for twelve months; staff with lapsed or missing "
                    "training should step back from AI-assisted hiring until they recertify."
                ),
                "quiz": [
                    {
                        "id": "a4q1",
                        "question": "Who should receive AI hiring compliance training?",
                        "options": [
                            "Only HR",
                            "Only executives",
                            "Everyone who interacts with AI hiring tools",
                            "Only IT staff",
                        ],
                        "correct_answer": 2,
                        "explanation": "Anyone who uses or decides on AI hiring output needs training.",
                    },
                    {
                        "id": "a4q2",
                        "question": "What should happen if an employee doesn't complete required training?",
                        "options": [
                            "Nothing",
                            "They should be restricted from hiring activities until complete",
                            "Terminate them immediately",
                            "Let them continue hiring anyway",
                        ],
                        "correct_answer": 1,
                        "explanation": "Untrained staff should not take part in AI-assisted hiring.",
                    },
                ],
            },
        ],
    },
    "executive": {
        "title": "Executive AI Governance Overview",
        "description": "High-level overview of AI hiring compliance for leadership",
        "target_audience": "C-Suite, VPs, Directors",
        "estimated_time": "20 minutes",
        "sections": [
            {
                "number": 1,
                "title": "Why AI Compliance Matters",
                "description": "Business and legal risks of AI in hiring",
                "video_duration_seconds": 420,
                "content": (
                    "Per-violation fines, litigation and reputational damage add up quickly. "
                    "Regulation of AI in hiring is accelerating and enforcement is increasing."
                ),
                "quiz": [
                    {
                        "id": "e1q1",
                        "question": "What is the per-violation fine range for NYC AI hiring violations?",
                        "options": ["$100-$200", "$500-$1,500", "$10,000-$50,000", "No fines, just warnings"],
                        "correct_answer": 1,
                        "explanation": "NYC can fine $500-$1,500 per violation of Local Law 144.",
                    },
                    {
                        "id": "e1q2",
                        "question": "Why should companies prioritize AI compliance now?",
                        "options": [
                            "It's optional",
                            "Regulations are accelerating and enforcement is increasing",
                            "Only large companies need to worry",
                            "AI compliance won't matter for years",
                        ],
                        "correct_answer": 1,
                        "explanation": "More states are passing laws and enforcement is increasing.",
                    },
                ],
            },
            {
                "number": 2,
                "title": "Governance & Oversight",
                "description": "Leadership responsibilities for AI compliance",
                "video_duration_seconds": 360,
                "content": (
                    "Leadership sets the tone, funds the compliance program and makes sure someone "
                    "owns AI governance. Ask regularly which AI tools are in use and whether the "
                    "organization is compliant everywhere it hires."
                ),
                "quiz": [
                    {
                        "id": "e2q1",
                        "question": "What is the executive's primary role in AI compliance?",
                        "options": [
                            "Personally review every hire",
                            "Set tone, allocate resources, and ensure governance",
                            "Write all policies",
                            "Conduct bias audits",
                        ],
                        "correct_answer": 1,
                        "explanation": "Executives set the tone, allocate resources and ensure governance exists.",
                    },
                    {
                        "id": "e2q2",
                        "question": "What question should executives regularly ask about AI hiring?",
                        "options": [
                            "Why do we hire people?",
                            "What AI tools are we using and are we compliant?",
                            "Can we eliminate HR?",
                            "How much does AI cost?",
                        ],
                        "correct_answer": 1,
                        "explanation": "Know which AI tools are in use and whether each hiring jurisdiction is covered.",
                    },
                ],
            },
        ],
    },
}
