"""
Bundled K-12 curriculum. Grade 0 is kindergarten.

Rows are (id, name, description, prerequisites, grade_level).
"""

from openalpha.pedagogy.catalog import Concept, Subject


def _concepts(rows) -> tuple:
    return tuple(
        Concept(id=cid, name=name, description=desc, prerequisites=tuple(prereqs), grade_level=grade)
        for cid, name, desc, prereqs, grade in rows
    )


MATH_CONCEPTS = _concepts([
    # K-2
    ("math-counting", "Counting Numbers", "Learn to count from 1 to 100", [], 0),
    ("math-addition-basic", "Basic Addition", "Adding single-digit numbers", ["math-counting"], 1),
    ("math-subtraction-basic", "Basic Subtraction", "Subtracting single-digit numbers", ["math-counting"], 1),
    ("math-place-value", "Place Value", "Understanding ones, tens, and hundreds", ["math-counting"], 2),
    # 3-5
    ("math-multiplication", "Multiplication", "Multiplying numbers and times tables", ["math-addition-basic"], 3),
    ("math-division", "Division", "Dividing numbers and understanding remainders", ["math-multiplication"], 3),
    ("math-fractions-intro", "Introduction to Fractions", "Understanding parts of a whole", ["math-division"], 4),
    ("math-decimals", "Decimals", "Understanding decimal numbers and place value", ["math-fractions-intro"], 5),
    # 6-8
    ("math-ratios", "Ratios and Proportions", "Understanding relationships between numbers", ["math-fractions-intro"], 6),
    ("math-integers", "Integers and Operations", "Working with positive and negative numbers", ["math-decimals"], 6),
    ("math-expressions", "Algebraic Expressions", "Using variables and simplifying expressions", ["math-integers"], 7),
    ("math-equations", "Solving Equations", "Finding unknown values in equations", ["math-expressions"], 7),
    ("math-linear-functions", "Linear Functions", "Understanding and graphing linear relationships", ["math-equations"], 8),
    # 9-12
    ("math-quadratics", "Quadratic Equations", "Solving and graphing quadratic functions", ["math-linear-functions"], 9),
    ("math-geometry", "Geometry Fundamentals", "Shapes, angles, and proofs", ["math-equations"], 10),
    ("math-trigonometry", "Trigonometry", "Sine, cosine, tangent and their applications", ["math-geometry"], 11),
    ("math-precalculus", "Pre-Calculus", "Functions, limits, and preparation for calculus", ["math-trigonometry", "math-quadratics"], 12),
])

READING_CONCEPTS = _concepts([
    # K-2
    ("read-alphabet", "Alphabet Recognition", "Learning letters and their sounds", [], 0),
    ("read-phonics", "Basic Phonics", "Sounding out simple words", ["read-alphabet"], 1),
    ("read-sight-words", "Sight Words", "Recognizing common words by sight", ["read-alphabet"], 1),
    ("read-simple-sentences", "Reading Simple Sentences", "Understanding basic sentence structure", ["read-phonics", "read-sight-words"], 2),
    # 3-5
    ("read-fluency", "Reading Fluency", "Reading smoothly and with expression", ["read-simple-sentences"], 3),
    ("read-comprehension-basic", "Basic Comprehension", "Understanding what you read", ["read-fluency"], 3),
    ("read-vocabulary", "Vocabulary Building", "Learning new words and their meanings", ["read-comprehension-basic"], 4),
    ("read-main-idea", "Finding Main Ideas", "Identifying the central message of a text", ["read-comprehension-basic"], 5),
    # 6-8
    ("read-inference", "Making Inferences", "Reading between the lines", ["read-main-idea"], 6),
    ("read-text-structure", "Text Structure", "Understanding how texts are organized", ["read-main-idea"], 6),
    ("read-literary-elements", "Literary Elements", "Plot, character, setting, and theme", ["read-inference"], 7),
    ("read-analysis", "Text Analysis", "Analyzing author's purpose and techniques", ["read-literary-elements"], 8),
    # 9-12
    ("read-rhetoric", "Rhetorical Analysis", "Understanding persuasion techniques", ["read-analysis"], 9),
    ("read-critical-reading", "Critical Reading", "Evaluating arguments and sources", ["read-rhetoric"], 10),
    ("read-literary-criticism", "Literary Criticism", "Different approaches to interpreting literature", ["read-critical-reading"], 11),
    ("read-synthesis", "Synthesis and Research", "Combining multiple sources to form conclusions", ["read-literary-criticism"], 12),
])

SCIENCE_CONCEPTS = _concepts([
    # K-2
    ("sci-senses", "Five Senses", "Exploring the world through our senses", [], 0),
    ("sci-living-nonliving", "Living vs Non-Living", "What makes something alive?", [], 1),
    ("sci-weather", "Weather Basics", "Understanding rain, sun, wind, and seasons", [], 1),
    ("sci-habitats", "Animal Habitats", "Where animals live and why", ["sci-living-nonliving"], 2),
    # 3-5
    ("sci-life-cycles", "Life Cycles", "How living things grow and change", ["sci-habitats"], 3),
    ("sci-ecosystems", "Ecosystems", "How living things interact with their environment", ["sci-life-cycles"], 4),
    ("sci-matter", "States of Matter", "Solids, liquids, and gases", [], 4),
    ("sci-energy", "Forms of Energy", "Light, heat, sound, and electricity", ["sci-matter"], 5),
    # 6-8
    ("sci-cells", "Cell Biology", "The building blocks of life", ["sci-life-cycles"], 6),
    ("sci-atoms", "Atoms and Molecules", "The building blocks of matter", ["sci-matter"], 6),
    ("sci-forces", "Forces and Motion", "How things move and why", ["sci-energy"], 7),
    ("sci-genetics", "Basic Genetics", "How traits are inherited", ["sci-cells"], 8),
    ("sci-chemical-reactions", "Chemical Reactions", "How substances change and interact", ["sci-atoms"], 8),
    # 9-12
    ("sci-biology", "Biology Foundations", "Comprehensive study of living systems", ["sci-genetics", "sci-cells"], 9),
    ("sci-chemistry", "Chemistry Foundations", "Comprehensive study of matter and reactions", ["sci-chemical-reactions"], 10),
    ("sci-physics", "Physics Foundations", "Comprehensive study of energy and forces", ["sci-forces"], 11),
    ("sci-earth-science", "Earth and Space Science", "Geology, astronomy, and environmental science", ["sci-chemistry", "sci-physics"], 12),
])

DEFAULT_SUBJECTS = (
    Subject(
        id="math",
        name="Mathematics",
        description="Build strong mathematical foundations from counting to calculus",
        concepts=MATH_CONCEPTS,
    ),
    Subject(
        id="reading",
        name="Reading & Language Arts",
        description="Develop reading comprehension and analytical skills",
        concepts=READING_CONCEPTS,
    ),
    Subject(
        id="science",
        name="Science",
        description="Explore the natural world through scientific inquiry",
        concepts=SCIENCE_CONCEPTS,
    ),
)
