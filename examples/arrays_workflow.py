# examples/arrays_workflow.py
import sys

import numpy as np
import pandas as pd
from summarizedexperiment import SummarizedExperiment

import microarray_workflow as mw

# --- with CEL files: python arrays_workflow.py pdata.txt celfiles/ ---
if len(sys.argv) == 3:
    mw.run_workflow(mw.WorkflowConfig(sys.argv[1], sys.argv[2], output_path="top_table.txt"))
    sys.exit(0)

# --- otherwise: toy log2 expression values (probesets x arrays) ---
pheno = pd.DataFrame(
    {
        "Target": ["control"] * 4 + ["treated"] * 4,
        "Time": ["early", "early", "late", "late"] * 2,
    },
    index=pd.Index([f"{g}{i}.CEL" for g in "abcd" for i in (1, 2)], name="sample"),
)
probes = [f"{1000 + i}_at" for i in range(500)]
rng = np.random.default_rng(1)
exprs = rng.normal(8.0, 0.4, size=(len(probes), len(pheno)))
exprs[:25, 4:] += 2.0  # treated arrays up

se = SummarizedExperiment(
    assays={"exprs": exprs},
    row_names=probes,
    column_names=list(pheno.index),
    column_data=mw.phenotype_to_biocframe(pheno),
)
se = mw.initialize_r(se, assay="exprs")

import microarray_workflow.limma as limma

design = mw.model_matrix(pheno, ["Target", "Time"])
print(design)

efit = limma.lm_fit(se, design).e_bayes()
print(mw.format_top_table(efit.top_table(coef=2, n=10)))

# treated vs control, averaged over time
groups = mw.model_matrix(pheno, ["Target"], intercept=False, prefix="")
cm = limma.make_contrasts(groups, TvsC="treated - control")
tt = limma.lm_fit(se, groups).contrasts_fit(cm).e_bayes().top_table(n=None)
print(mw.summarize_decisions(limma.decide_tests(limma.lm_fit(se, groups).contrasts_fit(cm))))

mw.write_top_table(tt, "toy_top_table.txt", r_names=True)
mw.volcano_plot(tt, save_path="toy_volcano.png")
